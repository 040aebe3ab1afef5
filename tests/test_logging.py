import logging

from sportshub.core.logger import InterceptHandler, logger


def test_stdlib_records_reach_loguru_with_component():
    seen = []
    sink_id = logger.add(lambda msg: seen.append(msg.record), level="DEBUG", format="{message}")
    std = logging.getLogger("sportshub.tests.intercept")
    std.handlers = [InterceptHandler()]
    std.propagate = False
    std.setLevel(logging.DEBUG)
    try:
        std.warning("purged %s records", 3)
    finally:
        logger.remove(sink_id)
        std.handlers = []

    assert len(seen) == 1
    assert seen[0]["message"] == "purged 3 records"
    assert seen[0]["level"].name == "WARNING"
    assert seen[0]["extra"]["component"] == "sportshub.tests.intercept"
