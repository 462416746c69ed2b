#!/usr/bin/env python3
import sys, struct, logging, argparse, itertools
from .common import decode

logger = logging.getLogger(__name__)

ENTRY_POINT = 0x200

def splitter(stream, base=ENTRY_POINT):  # yields addresses and big-endian 16-bit instruction words. the address advances by one per word.
    for addr in itertools.count(base):
        try: record = stream.read(2)
        except OSError as e:  # a failed read ends the program like EOF does
            logger.warning(f'read error at {hex(addr)}, stopping: {e}')
            return
        if len(record) < 2:
            if record: logger.debug(f'ignoring trailing byte 0x{record.hex()}')
            return
        yield addr, struct.unpack('>H', record)[0]

def decoder(stream, base=ENTRY_POINT):  # yields decoded instructions.
    for addr, instr in splitter(stream, base=base): yield decode(instr, addr)

def format_line(op): return f'0x{op.addr:03X}:\t0x{op.data:04X}\t{op}'

def dump(stream, out=None, base=ENTRY_POINT):
    out = out if out is not None else sys.stdout
    count = 0
    for op in decoder(stream, base=base):
        print(format_line(op), file=out)
        count += 1
    logger.debug(f'disassembled {count} words')
    return count

def address(s):  # non-negative hex address
    addr = int(s, 16)
    if addr < 0: raise argparse.ArgumentTypeError(f'negative address {s}')
    return addr

class usage_parser(argparse.ArgumentParser):
    def error(self, message):
        logger.debug(message)
        print(f'Error : bad parameters.\nUsage : {self.prog} programFileToDisassemble')
        sys.exit(1)

def main(argv=None):
    parser = usage_parser(
                    description='Disassembles a CHIP-8 program image.')
    parser.add_argument('-b', '--base', type=address, default=ENTRY_POINT, help='address of the first word, in hex (default: 200)')
    parser.add_argument('-v', '--verbose', action='store_true')
    parser.add_argument('program')
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format='%(levelname)s %(name)s: %(message)s')
    try: f = open(args.program, 'rb')
    except OSError as e:
        logger.debug(e)
        print(f"Error : could not load program '{args.program}'.")
        return 1
    with f: dump(f, base=args.base)
    return 0

if __name__ == '__main__': sys.exit(main())
