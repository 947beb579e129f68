"""
Async tracing example: concurrent requests and cancellation.

Requires opentelemetry-sdk for the console exporter.
"""

import asyncio
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor

from http_tracing import AsyncHTTPClient
from http_tracing.contrib.opentelemetry import create_tracing


async def main():
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
    tracer = provider.get_tracer("async-example")

    async with AsyncHTTPClient(base_url="https://httpbin.org") as client:
        root_span = create_tracing(tracer)(client, span_name="httpbin-async")

        # Concurrent requests: each one gets its own span
        responses = await asyncio.gather(
            client.get("/get"),
            client.get("/uuid"),
            client.get("/headers"),
        )
        print([r.status_code for r in responses])

        # Cancelled request: span is finished with cancelled=True
        task = asyncio.ensure_future(client.get("/delay/5"))
        await asyncio.sleep(0.5)
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            print("Request cancelled")

        root_span.end()

    provider.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
