#!/usr/bin/env python3
import sys
import argparse
from pathlib import Path
from clstr.utils import ClstrError, fasta_index, parse_clstr, write_fasta
from clstr.ops import cluster_fasta_name, cluster_fasta_records


def main():
    parser = argparse.ArgumentParser(
        description="Generate one fasta file per cluster, taking sequences from the database "
                    "the cluster file was derived from."
    )
    parser.add_argument('input_file', type=Path, help="Input .clstr file")
    parser.add_argument('database', help="FASTA database of the clustered sequences, gzipped or not")
    args = parser.parse_args()

    try:
        lookup = fasta_index(args.database)
        for cluster in parse_clstr(args.input_file):
            name = cluster_fasta_name(cluster, lookup)
            output_file = args.input_file.with_name(f"{args.input_file.stem}.{name}.fasta")
            with open(output_file, 'w', encoding='utf-8') as f:
                write_fasta(f, cluster_fasta_records(cluster, lookup))
    except (ClstrError, OSError, UnicodeDecodeError) as e:
        print(f"clstr error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
