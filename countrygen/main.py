import argparse
import logging
import time
from typing import Any, Dict, Optional

from .config import ConfigModel, ProviderConfig, load_config, model_as_dict, normalize_code
from .errors import CountryDataError
from .io.artifacts import write_manifest
from .io.writer import write_outputs
from .providers.base import AbstractProvider
from .providers.fixture import FileProvider
from .providers.reference import ReferenceProvider
from .transforms.pipeline import build_outputs, filter_records, shuffle_codes

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False):
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")


def build_provider(cfg: ConfigModel) -> AbstractProvider:
    if cfg.provider.kind == "file":
        return FileProvider(cfg.provider.path)
    return ReferenceProvider()


def run(
    cfg: ConfigModel,
    provider: Optional[AbstractProvider] = None,
    seed: Optional[int] = None,
) -> Dict[str, Any]:
    """Fetch, filter, transform, shuffle and write both artifacts once.

    Raises a CountryDataError subclass on any fatal problem; nothing is written
    unless fetch and transform succeed. Returns a summary of the run.
    """
    if seed is None:
        seed = cfg.seed if cfg.seed is not None else int(time.time())
    if provider is None:
        provider = build_provider(cfg)

    logger.debug(f"Fetching countries from {provider.source} provider...")
    records = provider.fetch()
    kept = filter_records(records, cfg.excluded_codes)
    logger.debug(f"Kept {len(kept)} of {len(records)} countries after exclusions")
    mapping, codes = build_outputs(kept)
    shuffled = shuffle_codes(codes, seed=seed)
    logger.debug(f"Shuffled {len(shuffled)} codes with seed {seed}")
    outputs = write_outputs(mapping, shuffled, cfg.output)
    return {
        "seed": seed,
        "provider": provider.source,
        "n_fetched": len(records),
        "n_excluded": len(records) - len(kept),
        "n_countries": len(codes),
        "exclude": sorted(cfg.excluded_codes),
        "outputs": outputs,
    }


def main(cli_args=None) -> int:
    # seed from the wall clock at process start unless overridden
    clock_seed = int(time.time())
    parser = argparse.ArgumentParser(
        description="Generate countries.json and a shuffled countryList.json"
    )
    parser.add_argument("--config", "-c", default=None)
    parser.add_argument(
        "--exclude",
        "-x",
        default=None,
        help="Optional comma-separated list of two-letter codes to exclude, overriding config",
    )
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument(
        "--provider-file",
        default=None,
        help="Read country records from a JSON/YAML file instead of the reference catalog",
    )
    parser.add_argument("--manifest", action="store_true")
    parser.add_argument("--debug", action="store_true")
    args = parser.parse_args(cli_args)
    setup_logging(args.debug)
    cfg = load_config(args.config)

    if args.exclude is not None:
        try:
            codes = [normalize_code(c) for c in args.exclude.split(",") if c.strip()]
        except ValueError as e:
            parser.error(str(e))
        cfg.exclude = sorted(set(codes))
        logger.debug(f"Overriding exclusions from CLI: {cfg.exclude}")
    if args.provider_file:
        cfg.provider = ProviderConfig(kind="file", path=args.provider_file)
    if args.manifest:
        cfg.manifest.enabled = True
    if args.seed is not None and not (0 <= args.seed < 2**32):
        parser.error("--seed must be between 0 and 2**32 - 1")

    seed = args.seed if args.seed is not None else cfg.seed
    if seed is None:
        seed = clock_seed

    try:
        summary = run(cfg, seed=seed)
    except CountryDataError as e:
        logger.error(f"{e.stage} failed: {e}")
        return 1

    if cfg.manifest.enabled:
        manifest = dict(summary)
        manifest["config_snapshot"] = model_as_dict(cfg)
        try:
            mpath = write_manifest(
                manifest, outputs=summary["outputs"], artifact_dir=cfg.manifest.artifact_dir
            )
            logger.debug(f"Wrote manifest to {mpath}")
        except OSError as e:
            logger.warning(f"Failed to write manifest: {e}")
    logger.info("Done.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
