from .universal_router import (
    Permit2Allowance,
    PermitSigner,
    RouterCommand,
    SwapExecuteParams,
    SwapStep,
    UniversalRouterSpecialAddress,
    V4Action,
    encode_swap,
    permit2_typed_data,
)

__all__ = (
    "Permit2Allowance",
    "PermitSigner",
    "RouterCommand",
    "SwapExecuteParams",
    "SwapStep",
    "UniversalRouterSpecialAddress",
    "V4Action",
    "encode_swap",
    "permit2_typed_data",
)
