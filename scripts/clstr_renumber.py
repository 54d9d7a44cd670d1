#!/usr/bin/env python3
import sys
import argparse
from clstr.utils import ClstrError, ClstrWriter, clstr_iter


def main():
    parser = argparse.ArgumentParser(
        description="Renumber clusters and sequences in a .clstr file. "
                    "Identities are rewritten with two decimals."
    )
    parser.add_argument('input', nargs='?', type=argparse.FileType('r', encoding='utf-8'), default=sys.stdin,
                        help="Input .clstr file (default: stdin)")
    args = parser.parse_args()

    try:
        ClstrWriter(sys.stdout).write_clusters(clstr_iter(args.input))
    except (ClstrError, OSError, UnicodeDecodeError) as e:
        print(f"clstr error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
