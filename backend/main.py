"""
Main entry point for the chart configuration backend.
Exposes the chart engine, ingestion and catalogue over JSON-RPC.
"""
import sys
import asyncio
import logging
from functools import partial
from pathlib import Path
from typing import Dict, Any, List, Optional
import signal

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent))

import config
from analysis.weights import DEFAULT_WEIGHTS
from core.dataset import DatasetSnapshot
from data_io import catalog
from data_io.ingestor import DataIngestor
from execution.engine import ChartEngine
from formatting.chart import ChartFormatter
from ipc_handler import IPCHandler
from logging_config import setup_logging

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


class ChartBackend:
    """
    Backend application: one command handler per JSON-RPC method.

    Every call carries its own dataset; nothing is cached between calls.
    """

    def __init__(self, ipc: Optional[IPCHandler] = None):
        weights = DEFAULT_WEIGHTS.with_overrides(sample_size=config.sample_size)
        self.engine = ChartEngine(weights)
        self.formatter = ChartFormatter()
        self.ingestor = DataIngestor()
        self.ipc = ipc or IPCHandler(
            max_concurrent_requests=config.max_concurrent_requests,
            request_timeout=config.request_timeout
        )
        self.running = False

        self._register_handlers()

        logger.info("ChartBackend initialized")

    def _register_handlers(self):
        handlers = {
            'ping': self.cmd_ping,
            'configure_chart': self.cmd_configure_chart,
            'compute_labels': self.cmd_compute_labels,
            'describe_fields': self.cmd_describe_fields,
            'normalize_payload': self.cmd_normalize_payload,
            'load_file': self.cmd_load_file,
            'list_organisations': self.cmd_list_organisations,
            'list_resources': self.cmd_list_resources,
        }

        for command, handler in handlers.items():
            self.ipc.register_handler(command, handler)

    async def _run(self, func, *args, **kwargs):
        """Run blocking engine work off the event loop."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, *args, **kwargs))

    @staticmethod
    def _snapshot(fields: Any, records: Any) -> DatasetSnapshot:
        return DatasetSnapshot.from_payload({"fields": fields, "records": records})

    # ========== Command Handlers ==========

    async def cmd_ping(self) -> Dict[str, Any]:
        """
        Health check endpoint.

        Returns:
            Status information
        """
        return {
            "status": "healthy",
            "version": VERSION,
            "sample_size": self.engine.weights.sample_size,
        }

    async def cmd_configure_chart(self, fields: List[Any], records: List[Dict[str, Any]],
                                  x_key: Optional[str] = None, y_key: Optional[str] = None,
                                  series_key: Optional[str] = None, sum_data: Optional[bool] = None,
                                  use_bar_chart: Optional[bool] = None) -> Dict[str, Any]:
        """
        Build the full chart configuration for a dataset.

        Args:
            fields: Field descriptions `[{"id", "type"}]`
            records: Rows keyed by field id
            x_key, y_key, series_key: Optional user choices (auto when omitted,
                `series_key=""` disables series)
            sum_data, use_bar_chart: Optional user toggles

        Returns:
            Renderer payload
        """
        snapshot = self._snapshot(fields, records)
        configuration = await self._run(
            self.engine.configure, snapshot,
            x_key=x_key, y_key=y_key, series_key=series_key,
            sum_data=sum_data, use_bar_chart=use_bar_chart
        )
        logger.info(f"Configured {configuration.chart_type} chart: {configuration.y_key} by "
                    f"{configuration.x_key}, {len(configuration.dataset)} series")
        return self.formatter.format(configuration)

    async def cmd_compute_labels(self, fields: List[Any], records: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Automatic X, Y and series selection only."""
        snapshot = self._snapshot(fields, records)
        selection = await self._run(self.engine.select_axes, snapshot)
        return selection.to_dict()

    async def cmd_describe_fields(self, fields: List[Any], records: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Per-field classification and axis scores."""
        snapshot = self._snapshot(fields, records)
        return {"fields": await self._run(self.engine.describe_fields, snapshot)}

    async def cmd_normalize_payload(self, payload: Dict[str, Any], name: Optional[str] = None) -> Dict[str, Any]:
        """
        Normalise a v2 or CKAN rows response to `{fields, records}`.

        Returns:
            Snapshot dictionary
        """
        snapshot = self.ingestor.from_api_payload(payload, name=name)
        return snapshot.to_dict()

    async def cmd_load_file(self, file_path: str) -> Dict[str, Any]:
        """
        Load a local CSV/TSV/JSON file as a dataset.

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If the path is not a regular file
        """
        if not file_path or not isinstance(file_path, str):
            raise ValueError("file_path must be a non-empty string")

        file_path = self._sanitize_path(file_path)
        snapshot = await self._run(self.ingestor.load_file, file_path)
        return snapshot.to_dict()

    async def cmd_list_organisations(self, listing: Any) -> Dict[str, Any]:
        """Sorted unique organisations owning CSV resources."""
        resources = catalog.extract_resources(listing)
        organisations = catalog.list_organisations(resources)
        return {
            "organisations": organisations,
            "count": len(organisations)
        }

    async def cmd_list_resources(self, listing: Any, organisation: Optional[str] = None) -> Dict[str, Any]:
        """
        CSV resources from a dataset listing, optionally for one organisation.

        Returns:
            Resource ids with their display names
        """
        resources = catalog.extract_resources(listing)
        if organisation is not None:
            resource_ids = catalog.filter_resource_ids(resources, organisation)
        else:
            resource_ids = list(dict.fromkeys(r.resource_id for r in resources))

        return {
            "resources": [
                {"resource_id": rid, "resource_name": catalog.get_resource_name(resources, rid)}
                for rid in resource_ids
            ],
            "count": len(resource_ids)
        }

    # ========== Helper Methods ==========

    def _sanitize_path(self, file_path: str) -> str:
        """
        Resolve a user-provided path to an existing regular file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the path is not a file
        """
        path = Path(file_path).expanduser().resolve()

        if not path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        if not path.is_file():
            raise ValueError(f"Not a file: {file_path}")

        return str(path)

    async def start(self):
        """Start the backend server."""
        self.running = True
        logger.info("Chart Backend starting...")
        await self.ipc.start()

    async def shutdown(self):
        """Graceful shutdown."""
        if not self.running:
            return

        logger.info("Shutting down Chart Backend...")
        self.running = False
        await self.ipc.shutdown()
        logger.info("Chart Backend shutdown complete")


async def main():
    """Main entry point."""
    setup_logging(config.log_level, config.log_file)

    backend = ChartBackend()

    if sys.platform != "win32":
        loop = asyncio.get_running_loop()

        def signal_handler(signum):
            logger.info(f"Received signal {signum}, shutting down...")
            asyncio.create_task(backend.shutdown())

        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, lambda s=sig: signal_handler(s))

    try:
        await backend.start()
    finally:
        await backend.shutdown()


def run():
    """Console entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nBackend stopped by user", file=sys.stderr)
    except Exception as e:
        print(f"Critical failure: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    run()
