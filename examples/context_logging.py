"""Minimal example demonstrating logfmt_console scopes and structured fields."""

from __future__ import annotations

import time

import logfmt_console


def main() -> None:
    logfmt_console.configure(
        {
            "formatter": {
                "timestamp_format": "%Y-%m-%dT%H:%M:%S%z",
                "include_scopes": True,
            },
            "handler": {"stream": "stdout", "level": "INFO"},
        }
    )

    logger = logfmt_console.get_context_logger("examples.orders", App="logfmt-demo", Env="dev")
    for order_id in range(1, 4):
        with logger.begin_scope(OrderId=order_id):
            logger.info("processed order", extra={"Total": round(order_id * 19.99, 2)}, event_id=100)
        time.sleep(0.1)

    try:
        raise RuntimeError("payment gateway timed out")
    except RuntimeError:
        logger.exception("order failed")


if __name__ == "__main__":
    main()
