from __future__ import annotations

import pytest

from configdoc.reference import ROOT_BLOCKS, GRPCClientConfig, ServerConfig
from configdoc.roots import RootBlock, RootBlockRegistry


class DerivedServerConfig(ServerConfig):
    pass


def test_lookup_is_by_identity() -> None:
    assert ROOT_BLOCKS.is_root(GRPCClientConfig) == (
        "grpc_client",
        "The grpc_client block configures the gRPC client used to communicate between two services.",
    )
    assert ROOT_BLOCKS.is_root(DerivedServerConfig) is None
    assert ServerConfig in ROOT_BLOCKS
    assert DerivedServerConfig not in ROOT_BLOCKS


def test_duplicates_are_rejected() -> None:
    with pytest.raises(ValueError, match="duplicate root block name"):
        RootBlockRegistry(
            [
                RootBlock("server", "", ServerConfig),
                RootBlock("server", "", GRPCClientConfig),
            ]
        )
    with pytest.raises(ValueError, match="registered twice"):
        RootBlockRegistry(
            [
                RootBlock("server", "", ServerConfig),
                RootBlock("http_server", "", ServerConfig),
            ]
        )


def test_empty_registry() -> None:
    registry = RootBlockRegistry()
    assert len(registry) == 0
    assert registry.lookup(ServerConfig) is None
    assert list(registry) == []
    assert "server" in ROOT_BLOCKS.names()
