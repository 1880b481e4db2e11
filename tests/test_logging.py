import structlog

from core.logging import BusinessEvents, get_log_level, get_log_renderer


class _TestLogger:
    def __init__(self):
        self.output = []

    def __call__(self, logger, method_name, event_dict):
        """Process log events and store them for test assertions"""
        self.output.append(event_dict.copy())
        return event_dict


def test_structlog_json():
    test_logger = _TestLogger()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            test_logger,
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    log = structlog.get_logger("test")
    log.bind(provider="braintree").info(
        BusinessEvents.PAYMENT_SUCCESS, provider_transaction_id="txn_1"
    )

    log_dict = test_logger.output[-1]
    assert log_dict["provider"] == "braintree"
    assert log_dict["event"] == "payment.success"
    assert log_dict["provider_transaction_id"] == "txn_1"
    assert "timestamp" in log_dict
    assert log_dict["level"] == "info"


def test_renderer_follows_environment(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "production")
    assert isinstance(get_log_renderer(), structlog.processors.JSONRenderer)

    monkeypatch.setenv("ENVIRONMENT", "development")
    assert isinstance(get_log_renderer(), structlog.dev.ConsoleRenderer)


def test_log_level_from_environment(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert get_log_level() == "DEBUG"


def test_business_event_names_are_unique():
    names = [
        value
        for key, value in vars(BusinessEvents).items()
        if not key.startswith("_")
    ]
    assert len(names) == len(set(names))
