"""
Order event fan-out: Kafka (when configured) and live restaurant listeners.
"""
import asyncio
import json
import logging
from typing import Optional

from aiokafka import AIOKafkaProducer
from aiokafka.errors import KafkaError

from fastfeast import config
from fastfeast.notification_service.main import ConnectionManager, manager

logger = logging.getLogger(__name__)

ORDER_PLACED = "ORDER_PLACED"
ORDER_PAID = "ORDER_PAID"

TOPICS = {
    ORDER_PLACED: "order_events",
    ORDER_PAID: "order_paid",
}


class OrderEventPublisher:
    def __init__(self, notifier: ConnectionManager, bootstrap_servers: str = ""):
        self.notifier = notifier
        self.bootstrap_servers = bootstrap_servers
        self.producer: Optional[AIOKafkaProducer] = None

    async def start(self, max_retries: int = None, retry_delay: float = None):
        if not self.bootstrap_servers:
            logger.info("Kafka not configured, order events stay in-process")
            return

        max_retries = config.KAFKA_CONNECT_RETRIES if max_retries is None else max_retries
        retry_delay = config.KAFKA_RETRY_DELAY if retry_delay is None else retry_delay
        for attempt in range(1, max_retries + 1):
            producer = AIOKafkaProducer(bootstrap_servers=self.bootstrap_servers)
            try:
                logger.info("Connecting to Kafka (attempt %d/%d)", attempt, max_retries)
                await producer.start()
                self.producer = producer
                logger.info("Kafka producer connected")
                return
            except KafkaError as e:
                logger.warning("Kafka not reachable yet: %s", e)
                await producer.stop()
                if attempt < max_retries:
                    await asyncio.sleep(retry_delay)
        logger.error("Giving up on Kafka after %d attempts; running without it", max_retries)

    async def stop(self):
        if self.producer:
            await self.producer.stop()
            self.producer = None

    async def publish(self, event: str, payload: dict, restaurant_id: Optional[int] = None,
                      message: Optional[str] = None):
        body = {"event": event, **payload}
        if self.producer:
            try:
                await self.producer.send_and_wait(TOPICS[event], json.dumps(body).encode("utf-8"))
                logger.info("Kafka sent %s", body)
            except KafkaError as e:
                logger.error("Kafka send failed for %s: %s", event, e)

        if restaurant_id is not None and message:
            await self.notifier.send_message(message, restaurant_id)

    async def order_placed(self, order_id: int, restaurant_id: int, item_count: int,
                           total_amount: float):
        await self.publish(
            ORDER_PLACED,
            {"order_id": order_id, "restaurant_id": restaurant_id, "amount": total_amount},
            restaurant_id=restaurant_id,
            message=f"New order #{order_id}: {item_count} item(s) - {total_amount:,.2f}",
        )

    async def order_paid(self, order_id: int, restaurant_id: int, total_amount: float,
                         payment_intent_id: str):
        await self.publish(
            ORDER_PAID,
            {
                "order_id": order_id,
                "restaurant_id": restaurant_id,
                "amount": total_amount,
                "transaction_id": payment_intent_id,
            },
            restaurant_id=restaurant_id,
            message=f"Order #{order_id} PAID: {total_amount:,.2f}",
        )


events = OrderEventPublisher(manager, config.KAFKA_BOOTSTRAP_SERVERS)
