#!/usr/bin/env python3
import sys
import argparse
from pathlib import Path
from clstr.utils import ClstrError, parse_clstr, write_clstr
from clstr.ops import top_n


def count(value):
    n = int(value)
    if n < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {value}")
    return n


def main():
    parser = argparse.ArgumentParser(description="Write the top N clusters to a new file.")
    parser.add_argument('input_file', type=Path, help="Input .clstr file")
    parser.add_argument('-n', '--cluster-number', type=count, default=500,
                        help="The number of top clusters to write to the output file (default: 500)")
    args = parser.parse_args()

    n = args.cluster_number
    output_file = args.input_file.with_name(f"{args.input_file.stem}.top{n}.clstr")
    try:
        clusters = top_n(parse_clstr(args.input_file), n)
        write_clstr(output_file, clusters)
    except (ClstrError, OSError, UnicodeDecodeError) as e:
        print(f"clstr error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
