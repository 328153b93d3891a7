"""Known RPC endpoints for the monitored networks."""

from __future__ import annotations

PULSECHAIN_NODES: tuple[str, ...] = (
    "https://rpc.pulsechain.com",
    "https://pulsechain.publicnode.com",
    "https://rpc-pulsechain.g4mm4.io",
)

K2_NODES: tuple[str, ...] = (
    # Main
    "https://k2.koii.live",
    "https://k2-main.koii.live",
    "https://k2-mainnet.koii.network",
    # Testnet
    "https://k2-testnet.koii.live",
    "https://k2-testnet.koii.network",
    # Devnet
    "https://k2-devnet.koii.live",
    "https://k2-dev.koii.network",
    # Community
    "https://k2-community-1.koii.live",
    "https://k2-community-2.koii.live",
    # Backup
    "https://k2-backup.koii.live",
    "https://k2-fallback.koii.network",
)


def nodes_for_network(network: str, nodes: tuple[str, ...] = K2_NODES) -> list[str]:
    """Filter an endpoint list by network kind.

    ``mainnet`` keeps anything with "main" in it plus every endpoint that is
    neither test nor dev. Unknown kinds get the full list.
    """
    if network == "mainnet":
        return [n for n in nodes if "main" in n or ("test" not in n and "dev" not in n)]
    if network == "testnet":
        return [n for n in nodes if "test" in n]
    if network == "devnet":
        return [n for n in nodes if "dev" in n]
    return list(nodes)


__all__ = ["K2_NODES", "PULSECHAIN_NODES", "nodes_for_network"]
