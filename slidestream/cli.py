"""Command line entry point."""

import asyncio
import json
import signal
import sys

import click
from openai import OpenAIError
from rich.console import Console
from rich.json import JSON
from rich.markup import escape
from rich.panel import Panel

from slidestream.app import create_app
from slidestream.config import settings
from slidestream.exceptions import SlideStreamError
from slidestream.schema import StartParams
from slidestream.ws.events import TERMINAL_EVENTS, SlideEvents

console = Console()


class ConsoleChannel:
    """Delivery channel that prints events instead of sending them."""

    def __init__(self):
        self.closed = False
        # Type of the terminal event once one arrives
        self.outcome = None

    async def send(self, message: str) -> None:
        event = json.loads(message)
        if event.get("type") in TERMINAL_EVENTS:
            self.outcome = event["type"]
        if event.get("type") == "slide":
            slide = event["slide"]
            body = "\n".join(f"• {escape(bullet)}" for bullet in slide.get("bullets", []))
            if slide.get("speakerNotes"):
                body += f"\n\n[dim]{escape(slide['speakerNotes'])}[/dim]"
            console.print(Panel(body, title=escape(f"{slide['id']} · {slide['title']}"), subtitle=slide["type"]))
        else:
            console.print(JSON.from_data(event))


@click.group()
def cli():
    """SlideStream CLI"""


@cli.command()
@click.option('--host', default='0.0.0.0', help='API server host')
@click.option('--port', type=int, default=8080, help='API server port')
@click.option('--ws-host', default='0.0.0.0', help='Stream server host')
@click.option('--ws-port', type=int, default=8081, help='Stream server port')
def serve(host, port, ws_host, ws_port):
    """Run the HTTP API and the WebSocket stream server."""

    async def _serve():
        app = create_app(settings, ws_host=ws_host, ws_port=ws_port)
        shutdown_event = asyncio.Event()

        def signal_handler():
            console.print("\n🛑 Received shutdown signal...", style="yellow")
            shutdown_event.set()

        if sys.platform != 'win32':
            loop = asyncio.get_running_loop()
            loop.add_signal_handler(signal.SIGINT, signal_handler)
            loop.add_signal_handler(signal.SIGTERM, signal_handler)

        await app.stream.start()
        api_task = asyncio.create_task(app.api.start(host, port))

        console.print("🚀 SlideStream started", style="green")
        console.print(f"   API endpoint: http://{host}:{port}")
        console.print(f"   Stream server: ws://{ws_host}:{app.stream.port}/ws/slides")
        console.print(f"   Stream address base: {settings.stream_base_url}")
        console.print("   Press Ctrl+C to stop")

        try:
            done, pending = await asyncio.wait(
                [api_task, asyncio.create_task(shutdown_event.wait())],
                return_when=asyncio.FIRST_COMPLETED,
            )
            for task in pending:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        finally:
            console.print("🛑 Shutting down...", style="yellow")
            await app.supervisor.shutdown()
            await app.stream.stop()
            console.print("✅ Stopped", style="green")

    try:
        asyncio.run(_serve())
    except KeyboardInterrupt:
        pass
    except Exception as e:
        console.print(f"❌ Fatal error: {e}", style="red")
        sys.exit(1)


@cli.command()
@click.argument('topic')
@click.option('--delay', type=float, default=None, help='Pause between slides in seconds')
def generate(topic, delay):
    """Generate a deck for TOPIC and print events to the terminal."""

    async def _generate():
        if delay is not None:
            settings.slide_delay = delay
        app = create_app(settings)
        channel = ConsoleChannel()
        result = app.supervisor.start(StartParams(topic_text=topic))
        app.registry.register(result.job_id, channel)
        await app.supervisor.drain()
        await app.registry.drain()
        return channel.outcome

    try:
        outcome = asyncio.run(_generate())
    except (SlideStreamError, OpenAIError) as e:
        console.print(f"❌ {e}", style="red")
        sys.exit(1)
    if outcome != SlideEvents.DONE:
        sys.exit(1)


if __name__ == '__main__':
    cli()
