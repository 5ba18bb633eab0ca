import argparse
import logging
from pathlib import Path

from .site import Site


def main(argv=None):
    parser = argparse.ArgumentParser(description="Build the static cookbook site.")
    parser.add_argument("--out", default=str(Path.cwd() / "build"), help="output directory")
    parser.add_argument("--lang", action="append", dest="languages",
                        help="language to build (repeatable, default: all enabled)")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    site = Site()
    recipes = site.source_content().recipes
    print(f"Loaded {len(recipes)} recipe(s).")
    written = site.build(args.out, args.languages)
    print(f"Wrote {written} page(s) to {args.out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
