import functools, logging, importlib.resources
import yaml

logger = logging.getLogger(__name__)

class OpcodeTableError(Exception): pass

def zext(length, word): return word&((1<<length)-1)
def fields(instr): return dict(op=instr>>12, nnn=instr&0xfff, kk=instr&0xff, x=(instr>>8)&0xf, y=(instr>>4)&0xf, n=instr&0xf)

def load_opcodes(text=None):
    """Parses the opcode table and groups it by mask, most specific mask first.

    Returns a list of (mask, {match: op}) pairs. An op is the yaml entry with its
    name added. Raises OpcodeTableError if the table is unreadable or inconsistent.
    """
    try:
        opcodes = yaml.safe_load(text if text is not None else (importlib.resources.files('chip8dis') / 'opcodes.yaml').read_text())
        by_mask = {}
        for name, op in opcodes.items():
            mask, match = int(op['mask'], 16), int(op['match'], 16)
            if match & ~mask: raise OpcodeTableError(f'{name}: match {hex(match)} has bits outside mask {hex(mask)}')
            if match in by_mask.setdefault(mask, {}): raise OpcodeTableError(f'{name}: duplicates {by_mask[mask][match]["name"]}')
            op['fmt'].format(**fields(0))  # fails early on unknown fields
            by_mask[mask][match] = op | {'name': name}
    except OpcodeTableError: raise
    except (OSError, yaml.YAMLError, AttributeError, KeyError, TypeError, ValueError) as e: raise OpcodeTableError(f'unable to load CHIP-8 opcode table: {e!r}') from e
    logger.debug(f'loaded {sum(len(m) for m in by_mask.values())} opcodes in {len(by_mask)} mask groups')
    return sorted(by_mask.items(), key=lambda mm: -bin(mm[0]).count('1'))

mask_match = load_opcodes()

class c8op:
    def __init__(self, **kwargs): [setattr(self, k, v) for k, v in kwargs.items()]
    def valid(self): return self.fmt is not None
    def mnemonic(self): return self.fmt.format(**self.args) if self.valid() else None
    def __repr__(self): return self.mnemonic() or '???'

@functools.lru_cache(maxsize=4096)
def decode(instr, addr=0):  # decodes one instruction word. never raises, unknown words give an invalid op.
    instr = zext(16, instr)
    o = c8op(addr=addr, data=instr, name='UNKNOWN', fmt=None, args=fields(instr))
    for mask, m_dict in mask_match:
        if op := m_dict.get(instr&mask, None):
            o.name, o.fmt = op['name'], op['fmt']
            break
    return o

def disassemble(instr): return decode(instr).mnemonic()  # mnemonic text, or None if not recognized
