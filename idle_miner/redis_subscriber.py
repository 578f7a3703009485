import asyncio
import logging
from typing import AsyncGenerator

from redis.asyncio import Redis
from redis.exceptions import RedisError

from idle_miner.converter import DataConverter
from idle_miner.models.schema_models import NetworkStateSchema

NETWORK_CHANNEL = "network"
HEART_BEAT = 15

data_converter = DataConverter()


class NetworkPublisher:
    """Publishes every saved network step on the Redis network channel."""

    def __init__(self, redis: Redis, channel: str = NETWORK_CHANNEL):
        self.redis: Redis = redis
        self.channel: str = channel

    async def __call__(self, network: NetworkStateSchema) -> None:
        """Publish the network view as JSON. A failed publish is logged, not raised.

        Args:
            network (NetworkStateSchema): The network state that was just saved
        """
        payload = data_converter.convert_network_to_view(network).model_dump_json()
        try:
            await self.redis.publish(self.channel, payload)
        except RedisError as e:
            logging.error(f"Failed to publish network step {network.work_height}: {e}")


class NetworkSubscriber:
    """Redis subscriber class to handle SSE events of the network."""

    def __init__(self, redis: Redis, channel: str = NETWORK_CHANNEL):
        self.redis: Redis = redis
        self.channel: str = channel

    async def event_generator(self, initial: NetworkStateSchema) -> AsyncGenerator[str, None]:
        """Event generator to handle SSE events.

        Sends the current state first, then one event per published step and a
        comment line every HEART_BEAT seconds so proxies keep the stream open.

        Args:
            initial (NetworkStateSchema): Network state at the time the client connected
        """
        payload = data_converter.convert_network_to_view(initial).model_dump_json()
        yield f"event: network_update\ndata: {payload}\n\n"

        pubsub = self.redis.pubsub()
        await pubsub.subscribe(self.channel)
        try:
            while True:
                msg = await pubsub.get_message(
                    ignore_subscribe_messages=True, timeout=HEART_BEAT
                )
                if msg and msg["type"] == "message":
                    data = msg["data"]
                    if isinstance(data, bytes):
                        data = data.decode()
                    logging.debug(f"Payload: {data}")
                    yield f"event: network_update\ndata: {data}\n\n"
                else:
                    yield ": heartbeat\n\n"
        except asyncio.CancelledError:
            logging.info("Network stream cancelled by client")
            raise
        finally:
            logging.info("Unsubscribing from channel")
            await pubsub.unsubscribe(self.channel)
            await pubsub.close()
