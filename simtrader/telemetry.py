"""OpenTelemetry metrics and logs for the trading simulator."""

import logging
import os
from decimal import Decimal

from opentelemetry import metrics
from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http._log_exporter import OTLPLogExporter
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource

from simtrader._version import VERSION

logger = logging.getLogger(__name__)

# Module-level state
_initialized = False
_meter = None
_log_handler = None

# Counters (cumulative)
_orders_executed_total = None
_orders_rejected_total = None
_trade_volume_total = None
_trade_value_total = None
_realized_pnl_total = None

# Gauges (current state) - using ObservableGauge with callbacks
_gauge_callbacks = {}


def setup_telemetry() -> bool:
    """Initialize OpenTelemetry metrics and log export.

    Returns True if telemetry was initialized, False if disabled.
    """
    global _initialized, _meter, _log_handler
    global _orders_executed_total, _orders_rejected_total
    global _trade_volume_total, _trade_value_total, _realized_pnl_total

    if _initialized:
        return True

    # Check if telemetry is enabled
    if os.getenv("OTLP_ENABLED", "true").lower() == "false":
        return False

    # Get configuration from environment
    otlp_endpoint = os.getenv("OTLP_ENDPOINT", "http://localhost:4318/v1/metrics")
    export_interval = int(os.getenv("OTLP_EXPORT_INTERVAL", "5000"))

    resource = Resource.create({
        "service.name": "simtrader",
        "service.version": VERSION,
    })

    exporter = OTLPMetricExporter(endpoint=otlp_endpoint)
    reader = PeriodicExportingMetricReader(
        exporter,
        export_interval_millis=export_interval,
    )
    provider = MeterProvider(resource=resource, metric_readers=[reader])
    metrics.set_meter_provider(provider)

    _meter = metrics.get_meter("simtrader", VERSION)

    _orders_executed_total = _meter.create_counter(
        "simtrader_orders_executed_total",
        description="Total number of orders executed",
        unit="1",
    )

    _orders_rejected_total = _meter.create_counter(
        "simtrader_orders_rejected_total",
        description="Total number of orders rejected by validation",
        unit="1",
    )

    _trade_volume_total = _meter.create_counter(
        "simtrader_trade_volume_total",
        description="Total number of shares traded",
        unit="shares",
    )

    _trade_value_total = _meter.create_counter(
        "simtrader_trade_value_total",
        description="Total cash value of executed orders",
        unit="currency",
    )

    _realized_pnl_total = _meter.create_up_down_counter(
        "simtrader_realized_pnl_total",
        description="Cumulative realized profit/loss from sells",
        unit="currency",
    )

    # === LOGS ===
    logs_endpoint = otlp_endpoint.replace("/v1/metrics", "/v1/logs")
    log_exporter = OTLPLogExporter(endpoint=logs_endpoint)
    logger_provider = LoggerProvider(resource=resource)
    logger_provider.add_log_record_processor(BatchLogRecordProcessor(log_exporter))
    set_logger_provider(logger_provider)

    _log_handler = LoggingHandler(
        level=logging.INFO,
        logger_provider=logger_provider,
    )

    _initialized = True
    return True


def get_log_handler() -> LoggingHandler | None:
    """Get the OTLP logging handler to attach to Python loggers."""
    return _log_handler


def is_enabled() -> bool:
    """Check if telemetry is initialized and enabled."""
    return _initialized


# --- Counter update functions ---

def record_order_executed(
    symbol: str,
    side: str,
    order_type: str,
    quantity: int,
    price: Decimal,
    realized_gain_loss: Decimal | None = None,
) -> None:
    """Record an executed order and its fill."""
    if not _initialized:
        return

    attributes = {"symbol": symbol, "side": side, "type": order_type}
    _orders_executed_total.add(1, attributes)
    _trade_volume_total.add(quantity, {"symbol": symbol})
    _trade_value_total.add(float(price * quantity), {"symbol": symbol})
    if realized_gain_loss is not None:
        _realized_pnl_total.add(float(realized_gain_loss), {"symbol": symbol})


def record_order_rejected(reason: str) -> None:
    """Record an order rejected before execution."""
    if not _initialized:
        return

    _orders_rejected_total.add(1, {"reason": reason})


# --- Gauge registration for observable metrics ---

def register_gauge_callback(name: str, callback, description: str, unit: str = "1") -> None:
    """Register a callback for an observable gauge.

    The callback should return an iterable of (value, attributes) tuples.
    """
    if not _initialized or _meter is None:
        return

    if name in _gauge_callbacks:
        return  # Already registered

    def wrapped_callback(options):
        try:
            for value, attrs in callback():
                yield metrics.Observation(value, attrs)
        except Exception:
            logger.exception("Gauge callback %s failed", name)

    _meter.create_observable_gauge(
        name,
        callbacks=[wrapped_callback],
        description=description,
        unit=unit,
    )
    _gauge_callbacks[name] = callback


# --- Portfolio metrics storage ---
# Latest values per account, exported as observable gauges
_portfolio_values: dict[str, float] = {}  # account_id -> total_value
_portfolio_gain_loss: dict[str, float] = {}  # account_id -> total_gain_loss


def _portfolio_value_callback():
    for account_id, value in _portfolio_values.items():
        yield (value, {"account_id": account_id})


def _portfolio_gain_loss_callback():
    for account_id, gain_loss in _portfolio_gain_loss.items():
        yield (gain_loss, {"account_id": account_id})


def setup_portfolio_metrics() -> None:
    """Register portfolio-related observable gauges.

    Call this after setup_telemetry() to register portfolio metrics.
    """
    if not _initialized or _meter is None:
        return

    register_gauge_callback(
        "portfolio_total_value",
        _portfolio_value_callback,
        "Market value of holdings",
        "currency",
    )

    register_gauge_callback(
        "portfolio_unrealized_gain_loss",
        _portfolio_gain_loss_callback,
        "Unrealized gain/loss on holdings",
        "currency",
    )


def record_portfolio_value(account_id: str, total_value: float, gain_loss: float) -> None:
    """Record portfolio value metrics for an account.

    Called when the portfolio summary is computed.
    """
    if not _initialized:
        return

    _portfolio_values[account_id] = total_value
    _portfolio_gain_loss[account_id] = gain_loss
