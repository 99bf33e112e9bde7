"""
Word frequency job.

    localmr run -i book.txt -o output/words.txt \\
        --mapper localmr.jobs.word_count:map_words \\
        --reducer localmr.jobs.word_count:sum_counts \\
        --combiner localmr.jobs.word_count:combine_counts \\
        --finalizer localmr.core.merger:sort_by_key
"""
import re

WORD = re.compile(r"[a-z0-9']+")


def map_words(record, emit):
    """Emit (word, 1) for every word of the line, lowercased."""
    for word in WORD.findall(record.lower()):
        emit(word, 1)


def combine_counts(word, counts):
    return [sum(counts)]


def sum_counts(word, counts, emit):
    emit(word, sum(counts))
