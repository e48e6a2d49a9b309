#!/usr/bin/env python3
"""
Print the reverse complement of each sequence argument, one per line, in input order.

Every argument is a sequence, including ones that start with '-'. There are no options.
"""

import sys

from rcseq.complement import InvalidCharacterError, MissingInputError
from rcseq.scheduler import BatchScheduler

EXIT_MISSING_INPUT = 1
EXIT_INVALID_CHARACTER = 2


def run(sequences, parallelism=None):
    try:
        BatchScheduler(parallelism=parallelism).run(sequences)
    except MissingInputError as e:
        sys.stderr.write(f"Error: {e}\n")
        return EXIT_MISSING_INPUT
    except InvalidCharacterError as e:
        sys.stdout.flush()
        sys.stderr.write(f"Error: {e}\n")
        return EXIT_INVALID_CHARACTER
    return 0


def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]
    sys.exit(run(list(argv)))


if __name__ == "__main__":
    main()
