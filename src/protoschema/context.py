from __future__ import annotations

from enum import Enum


class Context(str, Enum):
    """The kind of block a declaration is read in.

    Passed down each recursive call; which keywords are legal depends only on
    the innermost block.
    """

    FILE = "file"
    MESSAGE = "message"
    ENUM = "enum"
    RPC = "rpc"
    EXTEND = "extend"
    SERVICE = "service"

    def permits_package(self) -> bool:
        return self is Context.FILE

    def permits_syntax(self) -> bool:
        return self is Context.FILE

    def permits_import(self) -> bool:
        return self is Context.FILE

    def permits_extensions(self) -> bool:
        return self is not Context.FILE

    def permits_rpc(self) -> bool:
        return self is Context.SERVICE

    def permits_one_of(self) -> bool:
        return self is Context.MESSAGE
