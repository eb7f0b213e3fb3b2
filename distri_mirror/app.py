# distri_mirror/app.py
"""
Process entry: bootstrap the mirror from a full account scan, then keep it
current from the live log subscription.

Usage:
  distri-mirror --config config/distri_mirror.json
  distri-mirror --skip-bootstrap --debug
"""

from __future__ import annotations

import argparse
from typing import Any, Dict, List, Optional

from solana.rpc.commitment import Commitment
from solders.pubkey import Pubkey

from distri_mirror.chain.bootstrap import BootstrapScanner
from distri_mirror.chain.client import ChainClient
from distri_mirror.chain.dispatcher import EventDispatcher
from distri_mirror.chain.subscription import SolanaLogSource
from distri_mirror.chain.supervisor import SubscriptionSupervisor
from distri_mirror.config.config_loader import get_config, redacted_view
from distri_mirror.core.errors import ConfigError
from distri_mirror.core.logging import configure_console_log, log
from distri_mirror.data.data_locker import DataLocker
from distri_mirror.services.mirror_service import MirrorService

SOURCE = "App"


class MirrorApp:
    """Everything the pipeline needs, built once from the merged config."""

    def __init__(self, cfg: Dict[str, Any]) -> None:
        chain_cfg = cfg["chain"]
        sup_cfg = cfg["supervisor"]
        try:
            self.program_id = Pubkey.from_string(chain_cfg["program_id"])
        except ValueError as e:
            raise ConfigError(f"chain.program_id is not a valid public key: {e}") from e
        commitment = Commitment(chain_cfg["commitment"])

        self.locker = DataLocker(cfg["database"]["path"])
        self.chain = ChainClient(chain_cfg["rpc_url"], self.program_id, commitment)
        self.mirror = MirrorService(self.locker, self.chain)
        self.dispatcher = EventDispatcher(self.mirror)
        self.bootstrapper = BootstrapScanner(self.chain, self.mirror)
        self.supervisor = SubscriptionSupervisor(
            SolanaLogSource(chain_cfg["ws_url"]),
            self.dispatcher,
            self.program_id,
            commitment,
            reconnect_delay=float(sup_cfg["reconnect_delay_seconds"]),
            max_reconnect_delay=float(sup_cfg["max_reconnect_delay_seconds"]),
            connect_attempts=int(sup_cfg["connect_attempts"]),
        )

    def sync(self, skip_bootstrap: bool = False) -> None:
        """Bootstrap (blocking), then start the supervisor thread."""
        if skip_bootstrap:
            log.warning("Bootstrap skipped; mirror trusted as-is", source=SOURCE)
        elif not self.bootstrapper.bootstrap():
            log.warning("Bootstrap incomplete; continuing with live events", source=SOURCE)
        log.info(f"Mirror rows: {self.locker.counts()}", source=SOURCE)
        self.supervisor.start()

    def wait(self) -> int:
        """Block the foreground until the supervisor reports a fatal error."""
        self.supervisor.fatal.wait()
        return 1


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Mirror DistriAI program state into SQLite")
    p.add_argument("--config", help="JSON config file (defaults to $DISTRI_CONFIG_JSON or config/distri_mirror.json)")
    p.add_argument("--debug", action="store_true", help="Verbose logging")
    p.add_argument("--skip-bootstrap", action="store_true", help="Do not rescan program accounts on start")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_console_log(args.debug)
    try:
        cfg = get_config(args.config)
        log.info("Configuration loaded", source=SOURCE, payload=redacted_view(cfg))
        app = MirrorApp(cfg)
    except ConfigError as e:
        raise SystemExit(f"❌ {e}")

    try:
        app.sync(skip_bootstrap=args.skip_bootstrap)
        return app.wait()
    except KeyboardInterrupt:
        log.info("Interrupted; shutting down", source=SOURCE)
        return 0
    finally:
        app.locker.close()


if __name__ == "__main__":
    raise SystemExit(main())
