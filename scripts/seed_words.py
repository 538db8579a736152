#!/usr/bin/env python3
"""Seed a few sample words and phrases into storage."""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.models import Item, Sentence
from core.repository import ItemRepository
from core.utils import now_ms
from server.app import create_storage


def get_seed_data():
    """Sample items: (entry_type, word, meaning, [(en, ja, s5, s6)])."""
    return [
        ('word', 'affect', '影響する', [
            ('The weather can affect your mood.', '天気は気分に影響することがある。', [3], [1, 3, 5]),
        ]),
        ('word', 'reluctant', '気が進まない', [
            ('She was reluctant to leave the party.', '彼女はパーティーを去るのに気が進まなかった。', [2], [2, 4, 5]),
        ]),
        ('word', 'thorough', '徹底的な', [
            ('The doctor gave him a thorough check-up.', '医者は彼を徹底的に診察した。', [5], [1, 5, 6]),
        ]),
        ('phrase', 'look forward to', '楽しみにする', [
            ("I'm looking forward to the trip.", '旅行を楽しみにしている。', None, [1, 2, 3]),
        ]),
        ('phrase', 'give up', 'あきらめる', [
            ("Don't give up on your dreams.", '夢をあきらめないで。', None, [1, 2]),
        ]),
    ]


def main():
    parser = argparse.ArgumentParser(description='Seed sample words')
    parser.add_argument('--user', default='default', help='User ID (default: default)')
    args = parser.parse_args()

    repository = ItemRepository(create_storage(), args.user)
    existing = {item.word for item in repository.get_all()}
    now = now_ms()
    added = 0
    for entry_type, word, meaning, sentences in get_seed_data():
        if word in existing:
            continue
        item = Item.create(word, meaning, now, entry_type,
                           [Sentence.create(en, ja, s5, s6) for en, ja, s5, s6 in sentences])
        repository.upsert(item)
        added += 1
    print(f"Seeded {added} items for user '{args.user}'")
    return 0


if __name__ == '__main__':
    sys.exit(main())
