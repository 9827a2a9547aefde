#!/usr/bin/env python3
"""Print the identifiers derived from a flannel network custom object."""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict

import yaml

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from flannel_operator.flanneltpr import CustomObject  # noqa: E402
from flannel_operator.resource import NetworkState  # noqa: E402
from flannel_operator.spec import ClusterSpec  # noqa: E402

LOG = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "manifest",
        type=Path,
        help="YAML or JSON file holding a FlannelNetwork object or its bare spec",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args()


def load_spec(path: Path) -> ClusterSpec:
    data = yaml.safe_load(path.read_text())
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain a mapping")
    if "spec" in data:
        LOG.debug("treating %s as a full custom object", path)
        return CustomObject.from_dict(data).spec
    return ClusterSpec.from_dict(data)


def render(spec: ClusterSpec) -> Dict[str, Any]:
    return dataclasses.asdict(NetworkState.from_spec(spec))


def main() -> int:
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        spec = load_spec(args.manifest)
    except ValueError as exc:
        LOG.error("invalid manifest %s: %s", args.manifest, exc)
        return 1

    json.dump(render(spec), sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
