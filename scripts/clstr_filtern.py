#!/usr/bin/env python3
import sys
import argparse
from pathlib import Path
from clstr.utils import ClstrError, parse_clstr, write_clstr
from clstr.ops import filter_by_size


def count(value):
    n = int(value)
    if n < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {value}")
    return n


def main():
    parser = argparse.ArgumentParser(description="Write clusters with at least N records to a new file.")
    parser.add_argument('input_file', type=Path, help="Input .clstr file")
    parser.add_argument('-n', '--filter-number', type=count, default=20,
                        help="The minimum number of sequences in a cluster for it to be written (default: 20)")
    args = parser.parse_args()

    n = args.filter_number
    output_file = args.input_file.with_name(f"{args.input_file.stem}.more_than_{n}.clstr")
    try:
        write_clstr(output_file, filter_by_size(parse_clstr(args.input_file), n))
    except (ClstrError, OSError, UnicodeDecodeError) as e:
        print(f"clstr error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
