"""Executor command: read the profile and run one fuzzing engine."""

from __future__ import annotations

import logging
import os
import re
import sys

from .engine import SEED_ENV, with_driver_kind
from .logger import configure_logging
from .profile import Profile, read_profile

logger = logging.getLogger(__name__)

_UNSIGNED = re.compile(r"\+?[0-9]+")
_U64_LIMIT = 1 << 64


def resolve_seed(profile: Profile) -> int:
    """Seed from ``EXEC_PARAM_SEED`` when it is a valid u64, else the profile seed or 0."""
    raw = os.environ.get(SEED_ENV)
    if raw is not None and _UNSIGNED.fullmatch(raw):
        value = int(raw)
        if value < _U64_LIMIT:
            return value
    return 0 if profile.seed is None else profile.seed


def main(argv: list[str] | None = None) -> int:
    """Run the executor; command-line arguments are accepted and ignored."""
    configure_logging()

    profile = read_profile()
    if profile.driver is None:
        raise SystemExit("driver kind must be specified")
    if profile.count is None:
        raise SystemExit("run count must be an unsigned number")
    profile.print()

    seed = resolve_seed(profile)
    logger.info("init executor engine with seed: %d, base seed: %s", seed, profile.seed)
    engine = with_driver_kind(seed, profile.driver, profile.count, profile)
    logger.info("SQLite connection prepared and verified.")

    engine.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())