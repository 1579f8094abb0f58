"""
Gateway — the backend boundary.

    from basketry import gateway as G

    async with G.GraphQLGateway(config=config) as backend:
        match await backend.get_basket():
            case Ok(basket): ...
            case Error(G.GatewayError(kind=G.GatewayErrorKind.TRANSPORT)): ...
"""

from basketry.gateway._types import (
    GatewayErrorKind,
    GatewayError,
    MalformedPayload,
    GatewayResult,
    BackendGateway,
)
from basketry.gateway._graphql import GraphQLGateway

__all__ = (
    "GatewayErrorKind",
    "GatewayError",
    "MalformedPayload",
    "GatewayResult",
    "BackendGateway",
    "GraphQLGateway",
)
