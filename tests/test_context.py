from __future__ import annotations

import pytest

from protoschema.context import Context


@pytest.mark.parametrize(
    ("context", "package", "syntax", "imports", "extensions", "rpc", "one_of"),
    [
        (Context.FILE, True, True, True, False, False, False),
        (Context.MESSAGE, False, False, False, True, False, True),
        (Context.ENUM, False, False, False, True, False, False),
        (Context.RPC, False, False, False, True, False, False),
        (Context.EXTEND, False, False, False, True, False, False),
        (Context.SERVICE, False, False, False, True, True, False),
    ],
)
def test_permissions(
    context: Context, package: bool, syntax: bool, imports: bool, extensions: bool, rpc: bool, one_of: bool
) -> None:
    assert context.permits_package() is package
    assert context.permits_syntax() is syntax
    assert context.permits_import() is imports
    assert context.permits_extensions() is extensions
    assert context.permits_rpc() is rpc
    assert context.permits_one_of() is one_of
