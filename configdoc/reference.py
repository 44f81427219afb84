"""Reference configuration of a horizontally scalable metrics service.

Used as the default documentation target of the command line and as the
fixture exercising every documentation feature: root blocks mounted twice
under different flag prefixes, inline sections, custom value wrappers,
example providers, hidden, ``nocli`` and placeholder fields.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Dict, List, Optional

from pydantic import Field, SecretStr

from .flags import FlagSet
from .roots import RootBlock, RootBlockRegistry
from .schema import Section, doc
from .values import (
    CIDRSliceCSV,
    CustomTrackersConfig,
    Duration,
    LogFormat,
    LogLevel,
    RelabelConfigs,
    StringSliceCSV,
    URLValue,
)


class ServerConfig(Section):
    """HTTP and gRPC server settings."""

    http_listen_address: str = Field(default="")
    http_listen_port: int = Field(default=8080)
    grpc_listen_port: int = Field(default=9095)
    graceful_shutdown_timeout: Duration = Field(default_factory=lambda: Duration(seconds=30))
    log_level: LogLevel = Field(default=LogLevel.INFO)
    log_format: LogFormat = Field(default=LogFormat.LOGFMT)
    tls_cipher_suites: StringSliceCSV = Field(default_factory=StringSliceCSV)
    debug_pprof_enabled: bool = Field(default=False, json_schema_extra=doc("hidden"))
    path_prefix: str = Field(
        default="",
        description="Base path for all HTTP routes.",
        json_schema_extra=doc("nocli"),
    )

    def register_flags(self, fs: FlagSet) -> None:
        fs.var(self, "http_listen_address", "server.http-listen-address", "HTTP server listen address.")
        fs.var(self, "http_listen_port", "server.http-listen-port", "HTTP server listen port.")
        fs.var(self, "grpc_listen_port", "server.grpc-listen-port", "gRPC server listen port.")
        fs.var(
            self,
            "graceful_shutdown_timeout",
            "server.graceful-shutdown-timeout",
            "Timeout for graceful shutdowns.",
        )
        fs.var(
            self,
            "log_level",
            "log.level",
            "Only log messages with the given severity or above. Valid values: debug, info, warning, error.",
        )
        fs.var(self, "log_format", "log.format", "Output log messages in the given format. Valid values: logfmt, json.")
        fs.var(
            self,
            "tls_cipher_suites",
            "server.tls-cipher-suites",
            "Comma-separated list of cipher suites to use. Defaults to the Go runtime set.",
        )
        fs.var(self, "debug_pprof_enabled", "server.debug-pprof-enabled", "Expose profiling endpoints.")


class GRPCClientConfig(Section):
    """gRPC client settings, mounted under every component that dials a peer."""

    max_recv_msg_size: int = Field(default=100 << 20)
    max_send_msg_size: int = Field(default=100 << 20)
    grpc_compression: str = Field(default="")
    rate_limit: float = Field(default=0.0)
    rate_limit_burst: int = Field(default=0)
    backoff_on_ratelimits: bool = Field(default=False, json_schema_extra=doc(category="advanced"))
    connect_timeout: Duration = Field(default_factory=lambda: Duration(seconds=5))

    def register_flags_with_prefix(self, prefix: str, fs: FlagSet) -> None:
        fs.var(
            self,
            "max_recv_msg_size",
            f"{prefix}.grpc-max-recv-msg-size",
            "gRPC client max receive message size (bytes).",
        )
        fs.var(
            self,
            "max_send_msg_size",
            f"{prefix}.grpc-max-send-msg-size",
            "gRPC client max send message size (bytes).",
        )
        fs.var(
            self,
            "grpc_compression",
            f"{prefix}.grpc-compression",
            "Use compression when sending messages. Supported values are: 'gzip', 'snappy' and '' (disable compression)",
        )
        fs.var(self, "rate_limit", f"{prefix}.grpc-client-rate-limit", "Rate limit for gRPC client; 0 means disabled.")
        fs.var(self, "rate_limit_burst", f"{prefix}.grpc-client-rate-limit-burst", "Rate limit burst for gRPC client.")
        fs.var(
            self,
            "backoff_on_ratelimits",
            f"{prefix}.backoff-on-ratelimits",
            "Enable backoff and retry when we hit rate limits.",
        )
        fs.var(self, "connect_timeout", f"{prefix}.connect-timeout", "The maximum amount of time to establish a connection.")


class PoolConfig(Section):
    """Client pool settings."""

    client_cleanup_period: timedelta = Field(default=timedelta(seconds=15))
    health_check_ingesters: bool = Field(default=True)

    def register_flags(self, fs: FlagSet) -> None:
        fs.var(
            self,
            "client_cleanup_period",
            "distributor.client-cleanup-period",
            "How frequently to clean up clients for ingesters that have gone away.",
        )
        fs.var(
            self,
            "health_check_ingesters",
            "distributor.health-check-ingesters",
            "Run a health check on each ingester client during periodic cleanup.",
        )


class RateLimitConfig(Section):
    """Per-distributor ingestion limits, declared inline."""

    ingestion_rate: float = Field(default=10000.0)
    ingestion_burst_size: int = Field(default=200000)

    def register_flags(self, fs: FlagSet) -> None:
        fs.var(self, "ingestion_rate", "distributor.ingestion-rate-limit", "Per-tenant ingestion rate limit in samples per second.")
        fs.var(self, "ingestion_burst_size", "distributor.ingestion-burst-size", "Per-tenant allowed ingestion burst size (in number of samples).")


class DistributorConfig(Section):
    """Write path entry point."""

    pool: PoolConfig = Field(
        default_factory=PoolConfig,
        description="Settings of the ingester client pool.",
    )
    rate_limit: RateLimitConfig = Field(
        default_factory=RateLimitConfig,
        json_schema_extra=doc(inline=True),
    )
    ingester_client: GRPCClientConfig = Field(default_factory=GRPCClientConfig)
    extend_writes: bool = Field(default=True)
    max_recv_msg_size: int = Field(default=100 << 20, json_schema_extra=doc(category="advanced"))
    unused_flag_shard_by_all_labels: bool = Field(default=False)
    on_push: Optional[Callable[[str], None]] = Field(default=None)

    def register_flags(self, fs: FlagSet) -> None:
        self.pool.register_flags(fs)
        self.rate_limit.register_flags(fs)
        self.ingester_client.register_flags_with_prefix("ingester.client", fs)
        fs.var(
            self,
            "extend_writes",
            "distributor.extend-writes",
            "Try writing to an additional ingester in the presence of an ingester not in the ACTIVE state.",
        )
        fs.var(
            self,
            "max_recv_msg_size",
            "distributor.max-recv-msg-size",
            "Max message size in bytes that the distributors will accept for incoming push requests.",
        )
        fs.deprecated(
            "distributor.shard-by-all-labels",
            "Deprecated: series are always sharded by all labels.",
        )


class QuerierConfig(Section):
    """Read path settings."""

    max_concurrent: int = Field(default=20)
    timeout: Duration = Field(default_factory=lambda: Duration(minutes=2))
    query_store_after: timedelta = Field(default=timedelta(hours=12))
    store_gateway_client: GRPCClientConfig = Field(default_factory=GRPCClientConfig)
    lookback_delta: timedelta = Field(
        default=timedelta(minutes=5),
        description="Time since the last sample after which a time series is considered stale.",
        json_schema_extra=doc("nocli"),
    )

    def register_flags(self, fs: FlagSet) -> None:
        fs.var(self, "max_concurrent", "querier.max-concurrent", "The maximum number of concurrent queries.")
        fs.var(self, "timeout", "querier.timeout", "The timeout for a query.")
        fs.var(
            self,
            "query_store_after",
            "querier.query-store-after",
            "The time after which a metric should be queried from storage and not just ingesters.",
        )
        self.store_gateway_client.register_flags_with_prefix("querier.store-gateway-client", fs)


class StorageBackendConfig(Section):
    """Object storage client, shared by every component that persists blocks."""

    backend: str = Field(default="filesystem")
    endpoint: URLValue = Field(default_factory=URLValue)
    bucket_name: str = Field(default="", json_schema_extra=doc("required"))
    access_key_id: str = Field(default="")
    secret_access_key: SecretStr = Field(default=SecretStr(""))
    insecure: bool = Field(default=False, json_schema_extra=doc(category="advanced"))

    def register_flags_with_prefix(self, prefix: str, fs: FlagSet) -> None:
        fs.var(
            self,
            "backend",
            f"{prefix}.backend",
            "Backend storage to use. Supported backends are: s3, gcs, azure, swift, filesystem.",
        )
        fs.var(self, "endpoint", f"{prefix}.endpoint", "The object storage endpoint to connect to.")
        fs.var(self, "bucket_name", f"{prefix}.bucket-name", "Name of the bucket.")
        fs.var(self, "access_key_id", f"{prefix}.access-key-id", "Access key ID.")
        fs.var(self, "secret_access_key", f"{prefix}.secret-access-key", "Secret access key.")
        fs.var(self, "insecure", f"{prefix}.insecure", "If enabled, use http:// instead of https://.")


class BlocksStorageConfig(Section):
    """Long-term block storage."""

    backend: StorageBackendConfig = Field(default_factory=StorageBackendConfig)
    sync_dir: Path = Field(default=Path("./tsdb-sync/"))
    retention_period: Duration = Field(default_factory=lambda: Duration(hours=6))
    ignore_blocks_before: Optional[datetime] = Field(default=None)

    def register_flags(self, fs: FlagSet) -> None:
        self.backend.register_flags_with_prefix("blocks-storage", fs)
        fs.var(
            self,
            "sync_dir",
            "blocks-storage.sync-dir",
            "Directory to store synchronized block index headers.",
        )
        fs.var(
            self,
            "retention_period",
            "blocks-storage.retention-period",
            "TSDB blocks retention in the ingester before a block is removed.",
        )
        fs.var(
            self,
            "ignore_blocks_before",
            "blocks-storage.ignore-blocks-before",
            "Blocks created before this time are ignored by the store-gateway.",
        )


class RulerStorageConfig(Section):
    """Rule group storage."""

    backend: StorageBackendConfig = Field(default_factory=StorageBackendConfig)
    cache_ttl: timedelta = Field(default=timedelta(0))

    def register_flags(self, fs: FlagSet) -> None:
        self.backend.register_flags_with_prefix("ruler-storage", fs)
        fs.var(self, "cache_ttl", "ruler-storage.cache-ttl", "Time to live of cached rule groups. 0 disables the cache.")


class RulerConfig(Section):
    """Recording and alerting rule evaluation."""

    evaluation_interval: Duration = Field(default_factory=lambda: Duration(minutes=1))
    alertmanager_url: URLValue = Field(default_factory=URLValue)
    storage: RulerStorageConfig = Field(
        default_factory=RulerStorageConfig,
        description="Where rule groups are read from.",
    )
    external_labels: Dict[str, str] = Field(
        default_factory=dict,
        description="Labels added to every alert and recorded series.",
        json_schema_extra=doc("nocli"),
    )

    def register_flags(self, fs: FlagSet) -> None:
        fs.var(self, "evaluation_interval", "ruler.evaluation-interval", "How frequently to evaluate rules.")
        fs.var(
            self,
            "alertmanager_url",
            "ruler.alertmanager-url",
            "URL of the Alertmanager to send notifications to.",
        )
        self.storage.register_flags(fs)


class MemberlistConfig(Section):
    """Gossip based membership."""

    node_name: str = Field(default="", json_schema_extra=doc("default=<hostname>"))
    join_members: StringSliceCSV = Field(default_factory=StringSliceCSV)
    bind_port: int = Field(default=7946)
    allowed_cidrs: CIDRSliceCSV = Field(
        default_factory=CIDRSliceCSV,
        json_schema_extra=doc(category="experimental"),
    )
    cluster_label: str = Field(
        default="",
        json_schema_extra=doc("description=Label the gossip cluster so foreign members are rejected."),
    )

    def register_flags(self, fs: FlagSet) -> None:
        fs.var(self, "node_name", "memberlist.nodename", "Name of the node in memberlist cluster. Defaults to hostname.")
        fs.var(self, "join_members", "memberlist.join", "Comma-separated list of other cluster members to join.")
        fs.var(self, "bind_port", "memberlist.bind-port", "Port to listen on for gossip messages.")
        fs.var(self, "allowed_cidrs", "memberlist.allowed-cidrs", "CIDRs allowed to join the cluster.")
        fs.var(self, "cluster_label", "memberlist.cluster-label", "Cluster label.")


class LimitsConfig(Section):
    """Per-tenant limits; every value can be overridden at runtime per tenant."""

    ingestion_rate: float = Field(default=10000.0)
    max_label_names_per_series: int = Field(default=30)
    drop_labels: List[str] = Field(default_factory=list, json_schema_extra=doc("nocli"))
    active_series_custom_trackers: CustomTrackersConfig = Field(
        default_factory=CustomTrackersConfig,
        description="Additional custom trackers for active series.",
    )
    metric_relabel_configs: RelabelConfigs = Field(
        default_factory=RelabelConfigs,
        description="List of metric relabel configurations applied to incoming series.",
        json_schema_extra=doc("nocli"),
    )
    out_of_order_time_window: Duration = Field(default_factory=Duration)
    compactor_blocks_retention_period: Duration = Field(default_factory=Duration)

    def register_flags(self, fs: FlagSet) -> None:
        fs.var(self, "ingestion_rate", "limits.ingestion-rate", "Per-tenant ingestion rate limit in samples per second.")
        fs.var(
            self,
            "max_label_names_per_series",
            "validation.max-label-names-per-series",
            "Maximum number of label names per series.",
        )
        fs.var(
            self,
            "active_series_custom_trackers",
            "ingester.active-series-custom-trackers",
            "Additional active series metrics, matching the provided matchers.",
        )
        fs.var(
            self,
            "out_of_order_time_window",
            "ingester.out-of-order-time-window",
            "Non-zero value enables out-of-order support for most recent samples within the time window.",
        )
        fs.var(
            self,
            "compactor_blocks_retention_period",
            "compactor.blocks-retention-period",
            "Delete blocks containing samples older than the specified retention period. 0 disables it.",
        )


class Config(Section):
    """Root configuration of the service."""

    target: StringSliceCSV = Field(default_factory=lambda: StringSliceCSV(["all"]))
    multitenancy_enabled: bool = Field(default=True)
    no_auth_tenant: str = Field(default="anonymous", json_schema_extra=doc(category="advanced"))
    api_token: SecretStr = Field(
        default=SecretStr(""),
        description="Token required on administrative endpoints.",
        json_schema_extra=doc("nocli"),
    )
    server: ServerConfig = Field(default_factory=ServerConfig)
    distributor: DistributorConfig = Field(default_factory=DistributorConfig)
    querier: QuerierConfig = Field(default_factory=QuerierConfig)
    blocks_storage: BlocksStorageConfig = Field(
        default_factory=BlocksStorageConfig,
        description="The blocks storage configures where metric blocks are persisted.",
    )
    ruler: RulerConfig = Field(default_factory=RulerConfig, description="The ruler evaluates rules.")
    memberlist: MemberlistConfig = Field(default_factory=MemberlistConfig)
    limits: LimitsConfig = Field(default_factory=LimitsConfig)
    runtime_config_path: str = Field(
        default="",
        alias="-",
        description="Resolved at start-up, never configured.",
    )

    def register_flags(self, fs: FlagSet) -> None:
        fs.var(
            self,
            "target",
            "target",
            "Comma-separated list of components to include in the instantiated process.",
        )
        fs.var(
            self,
            "multitenancy_enabled",
            "auth.multitenancy-enabled",
            "When set to true, incoming HTTP requests must specify tenant ID in HTTP X-Scope-OrgId header.",
        )
        fs.var(
            self,
            "no_auth_tenant",
            "auth.no-auth-tenant",
            "Tenant ID to use when multitenancy is disabled.",
        )
        self.server.register_flags(fs)
        self.distributor.register_flags(fs)
        self.querier.register_flags(fs)
        self.blocks_storage.register_flags(fs)
        self.ruler.register_flags(fs)
        self.memberlist.register_flags(fs)
        self.limits.register_flags(fs)


ROOT_BLOCKS = RootBlockRegistry(
    [
        RootBlock(
            name="server",
            description="The server block configures the HTTP and gRPC server of the launched service(s).",
            section_type=ServerConfig,
        ),
        RootBlock(
            name="distributor",
            description="The distributor block configures the distributor.",
            section_type=DistributorConfig,
        ),
        RootBlock(
            name="querier",
            description="The querier block configures the querier.",
            section_type=QuerierConfig,
        ),
        RootBlock(
            name="grpc_client",
            description="The grpc_client block configures the gRPC client used to communicate between two services.",
            section_type=GRPCClientConfig,
        ),
        RootBlock(
            name="storage_backend",
            description="The storage_backend block configures the connection to the object storage backend.",
            section_type=StorageBackendConfig,
        ),
        RootBlock(
            name="memberlist",
            description="The memberlist block configures the gossip ring used for service discovery.",
            section_type=MemberlistConfig,
        ),
        RootBlock(
            name="limits",
            description="The limits block configures default and per-tenant limits imposed by services.",
            section_type=LimitsConfig,
        ),
    ]
)

__all__ = [
    "BlocksStorageConfig",
    "Config",
    "DistributorConfig",
    "GRPCClientConfig",
    "LimitsConfig",
    "MemberlistConfig",
    "QuerierConfig",
    "ROOT_BLOCKS",
    "RulerConfig",
    "ServerConfig",
    "StorageBackendConfig",
]
