"""The ``Init`` module: base types and constants imported implicitly."""

from __future__ import annotations

from elabfront.domain.environment import TYPE_SORT, ConstantInfo

INIT_MODULE = "Init"

INIT_DECLS: tuple[ConstantInfo, ...] = (
    ConstantInfo(name="Nat", type=TYPE_SORT, value="Nat", module=INIT_MODULE),
    ConstantInfo(name="String", type=TYPE_SORT, value="String", module=INIT_MODULE),
    ConstantInfo(name="Bool", type=TYPE_SORT, value="Bool", module=INIT_MODULE),
    ConstantInfo(name="true", type="Bool", value=True, module=INIT_MODULE),
    ConstantInfo(name="false", type="Bool", value=False, module=INIT_MODULE),
    ConstantInfo(name="Nat.zero", type="Nat", value=0, module=INIT_MODULE),
    ConstantInfo(name="String.empty", type="String", value="", module=INIT_MODULE),
)
