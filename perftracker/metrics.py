"""
Prometheus metrics for the Performance Tracker service.
"""
from prometheus_client import Counter, Histogram, Gauge, Info, CollectorRegistry
from typing import Optional
import psutil
import structlog

from .services.query import PERIOD_WINDOWS_MS

log = structlog.get_logger()


class Metrics:
    """
    Centralized metrics for the Performance Tracker service.
    """

    def __init__(self, service_name: str = "perftracker", version: str = "0.1.0", registry=None):
        self.service_name = service_name
        self.version = version
        self.registry = registry or CollectorRegistry()

        # HTTP Metrics
        self.http_requests_total = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["service", "method", "path", "status"],
            registry=self.registry,
        )

        self.http_request_duration = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["service", "method", "path"],
            registry=self.registry,
        )

        self.http_requests_active = Gauge(
            "http_requests_active",
            "Number of active HTTP requests",
            ["service"],
            registry=self.registry,
        )
        self.http_requests_active.labels(service=service_name).set(0)

        # Application Info
        self.app_info = Info(
            "app",
            "Application information",
            registry=self.registry,
        )
        self.app_info.info({"service": service_name, "version": version})

        self.app_up = Gauge(
            "app_up",
            "Application up status (1=up, 0=down)",
            ["service", "version"],
            registry=self.registry,
        )
        self.app_up.labels(service=service_name, version=version).set(1)

        # Business Metrics
        self.events_ingested_total = Counter(
            "tracker_events_ingested_total",
            "Total revenue events ingested",
            ["channel"],
            registry=self.registry,
        )

        self.event_amount = Histogram(
            "tracker_event_amount",
            "Revenue amount per ingested event",
            ["channel"],
            buckets=(1, 5, 10, 25, 50, 100, 250, 500, 1000, 5000),
            registry=self.registry,
        )

        self.events_stored = Gauge(
            "tracker_events_stored",
            "Number of revenue events held in memory",
            registry=self.registry,
        )

        self.queries_total = Counter(
            "tracker_queries_total",
            "Total revenue report queries",
            ["period"],
            registry=self.registry,
        )

        self.cache_refreshes_total = Counter(
            "tracker_cache_refreshes_total",
            "Read cache refreshes from the event store",
            registry=self.registry,
        )

        # System Metrics
        self.process_memory_bytes = Gauge(
            "process_resident_memory_bytes",
            "Resident memory size in bytes",
            ["service"],
            registry=self.registry,
        )

        self.process_open_fds = Gauge(
            "process_open_fds",
            "Number of open file descriptors",
            ["service"],
            registry=self.registry,
        )

        self.update_system_metrics()

    def update_system_metrics(self):
        """Update process metrics from psutil."""
        try:
            process = psutil.Process()
            self.process_memory_bytes.labels(service=self.service_name).set(process.memory_info().rss)

            # num_fds() is POSIX only
            if hasattr(process, "num_fds"):
                self.process_open_fds.labels(service=self.service_name).set(process.num_fds())
        except psutil.Error as e:
            log.warning("metrics.system_update_failed", error=str(e))

    def record_event_ingested(self, channel: str, amount: float):
        """Record one ingested revenue event."""
        self.events_ingested_total.labels(channel=channel).inc()
        if amount >= 0:
            self.event_amount.labels(channel=channel).observe(amount)

    def set_events_stored(self, count: int):
        """Set the number of stored events."""
        self.events_stored.set(count)

    def record_query(self, period: Optional[str], cache_refreshed: bool):
        """Record a report query and whether it refreshed the cache."""
        label = period if period in PERIOD_WINDOWS_MS else "all"
        self.queries_total.labels(period=label).inc()
        if cache_refreshed:
            self.cache_refreshes_total.inc()
