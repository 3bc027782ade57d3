"""A small stack machine that runs decoded module code objects."""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Callable, Dict, List, Optional

from navylib.debug import Logger
from navylib.marshal_reader import MarshalCode, MarshalObject, MarshalType

HAVE_ARGUMENT = 90
EXCEPT_HANDLER = 257


class Opcode(IntEnum):
    POP_TOP = 1
    ROT_TWO = 2
    ROT_THREE = 3
    DUP_TOP = 4
    DUP_TOP_TWO = 5
    ROT_FOUR = 6
    NOP = 9
    UNARY_POSITIVE = 10
    UNARY_NEGATIVE = 11
    UNARY_NOT = 12
    UNARY_INVERT = 15
    BINARY_MATRIX_MULTIPLY = 16
    INPLACE_MATRIX_MULTIPLY = 17
    BINARY_POWER = 19
    BINARY_MULTIPLY = 20
    BINARY_MODULO = 22
    BINARY_ADD = 23
    BINARY_SUBTRACT = 24
    BINARY_SUBSCR = 25
    BINARY_FLOOR_DIVIDE = 26
    BINARY_TRUE_DIVIDE = 27
    INPLACE_FLOOR_DIVIDE = 28
    INPLACE_TRUE_DIVIDE = 29
    GET_LEN = 30
    MATCH_MAPPING = 31
    MATCH_SEQUENCE = 32
    MATCH_KEYS = 33
    COPY_DICT_WITHOUT_KEYS = 34
    WITH_EXCEPT_START = 49
    GET_AITER = 50
    GET_ANEXT = 51
    BEFORE_ASYNC_WITH = 52
    END_ASYNC_FOR = 54
    INPLACE_ADD = 55
    INPLACE_SUBTRACT = 56
    INPLACE_MULTIPLY = 57
    INPLACE_MODULO = 59
    STORE_SUBSCR = 60
    DELETE_SUBSCR = 61
    BINARY_LSHIFT = 62
    BINARY_RSHIFT = 63
    BINARY_AND = 64
    BINARY_XOR = 65
    BINARY_OR = 66
    INPLACE_POWER = 67
    GET_ITER = 68
    GET_YIELD_FROM_ITER = 69
    PRINT_EXPR = 70
    LOAD_BUILD_CLASS = 71
    YIELD_FROM = 72
    GET_AWAITABLE = 73
    LOAD_ASSERTION_ERROR = 74
    INPLACE_LSHIFT = 75
    INPLACE_RSHIFT = 76
    INPLACE_AND = 77
    INPLACE_XOR = 78
    INPLACE_OR = 79
    LIST_TO_TUPLE = 82
    RETURN_VALUE = 83
    IMPORT_STAR = 84
    SETUP_ANNOTATIONS = 85
    YIELD_VALUE = 86
    POP_BLOCK = 87
    POP_EXCEPT = 89
    STORE_NAME = 90
    DELETE_NAME = 91
    UNPACK_SEQUENCE = 92
    FOR_ITER = 93
    UNPACK_EX = 94
    STORE_ATTR = 95
    DELETE_ATTR = 96
    STORE_GLOBAL = 97
    DELETE_GLOBAL = 98
    ROT_N = 99
    LOAD_CONST = 100
    LOAD_NAME = 101
    BUILD_TUPLE = 102
    BUILD_LIST = 103
    BUILD_SET = 104
    BUILD_MAP = 105
    LOAD_ATTR = 106
    COMPARE_OP = 107
    IMPORT_NAME = 108
    IMPORT_FROM = 109
    JUMP_FORWARD = 110
    JUMP_IF_FALSE_OR_POP = 111
    JUMP_IF_TRUE_OR_POP = 112
    JUMP_ABSOLUTE = 113
    POP_JUMP_IF_FALSE = 114
    POP_JUMP_IF_TRUE = 115
    LOAD_GLOBAL = 116
    IS_OP = 117
    CONTAINS_OP = 118
    RERAISE = 119
    JUMP_IF_NOT_EXC_MATCH = 121
    SETUP_FINALLY = 122
    LOAD_FAST = 124
    STORE_FAST = 125
    DELETE_FAST = 126
    GEN_START = 129
    RAISE_VARARGS = 130
    CALL_FUNCTION = 131
    MAKE_FUNCTION = 132
    BUILD_SLICE = 133
    LOAD_CLOSURE = 135
    LOAD_DEREF = 136
    STORE_DEREF = 137
    DELETE_DEREF = 138
    CALL_FUNCTION_KW = 141
    CALL_FUNCTION_EX = 142
    SETUP_WITH = 143
    EXTENDED_ARG = 144
    LIST_APPEND = 145
    SET_ADD = 146
    MAP_ADD = 147
    LOAD_CLASSDEREF = 148
    MATCH_CLASS = 152
    SETUP_ASYNC_WITH = 154
    FORMAT_VALUE = 155
    BUILD_CONST_KEY_MAP = 156
    BUILD_STRING = 157
    LOAD_METHOD = 160
    CALL_METHOD = 161
    LIST_EXTEND = 162
    SET_UPDATE = 163
    DICT_MERGE = 164
    DICT_UPDATE = 165

    @property
    def has_arg(self) -> bool:
        return self.value >= HAVE_ARGUMENT


class VmError(RuntimeError):
    """The code cannot be run."""


_STRING_TYPES = {
    MarshalType.STRING,
    MarshalType.SHORT_ASCII,
    MarshalType.SHORT_ASCII_INTERNED,
}

Builtin = Callable[[List[MarshalObject]], MarshalObject]


def _text(obj: MarshalObject) -> str:
    value = obj.value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


class VirtualMachine:
    """Runs code objects using a value stack and a table of names.

    The only builtin is ``debug_log``, which logs each of its arguments.
    """

    def __init__(self, out: Optional[Callable[[str], Any]] = None) -> None:
        self._logger = Logger(out)
        self._builtins: Dict[str, Builtin] = {"debug_log": self._debug_log}

    def _debug_log(self, args: List[MarshalObject]) -> MarshalObject:
        for arg in args:
            if arg.type in _STRING_TYPES:
                self._logger.log("{}", _text(arg))
            elif arg.type is MarshalType.INT:
                self._logger.log("{}", arg.value)
            else:
                raise VmError(f"{arg.type.name} not supported")
        return MarshalObject(MarshalType.NONE)

    @staticmethod
    def _pop(stack: List[MarshalObject]) -> MarshalObject:
        if not stack:
            raise VmError("stack underflow")
        return stack.pop()

    @staticmethod
    def _item(table: MarshalObject, index: int, what: str) -> MarshalObject:
        items = table.value or []
        if index >= len(items):
            raise VmError(f"{what} index {index} out of range")
        return items[index]

    def run(self, code: MarshalCode) -> Optional[MarshalObject]:
        """Execute ``code`` and return the value it returns, or None if it ends without one."""
        stack: List[MarshalObject] = []
        names: Dict[str, MarshalObject] = {}
        raw = bytes(code.code.value or b"")

        for offset in range(0, len(raw), 2):
            opcode = raw[offset]
            arg = raw[offset + 1] if offset + 1 < len(raw) else 0

            if opcode == Opcode.LOAD_NAME:
                name = _text(self._item(code.names, arg, "name"))
                if name in names:
                    stack.append(names[name])
                elif name in self._builtins:
                    stack.append(MarshalObject(MarshalType.BUILTIN, self._builtins[name]))
                else:
                    raise VmError(f"{name} is not defined")
            elif opcode == Opcode.LOAD_CONST:
                stack.append(self._item(code.consts, arg, "constant"))
            elif opcode == Opcode.CALL_FUNCTION:
                args = [self._pop(stack) for _ in range(arg)]
                func = self._pop(stack)
                if func.type is not MarshalType.BUILTIN:
                    raise VmError("only builtin functions can be called")
                stack.append(func.value(args))
            elif opcode == Opcode.STORE_NAME:
                name = _text(self._item(code.names, arg, "name"))
                names[name] = self._pop(stack)
            elif opcode == Opcode.POP_TOP:
                if stack:
                    stack.pop()
            elif opcode == Opcode.RETURN_VALUE:
                return self._pop(stack)
            elif opcode == Opcode.BINARY_ADD:
                tos = self._pop(stack)
                if not stack:
                    raise VmError("stack underflow")
                left = stack[-1]
                stack[-1] = MarshalObject(left.type, left.value + tos.value)
            else:
                raise VmError(f"Unknown opcode {opcode}")

        return None