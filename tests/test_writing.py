"""Tests for daily writing practice and assistant prompts."""

import random
import unittest

from core.models import Sentence
from core.prompts import build_qa_prompt, build_writing_prompt
from core.utils import day_key
from core.writing import DailyWriting, DailyWritingTracker, ensure_today, reshuffle_today

from tests.mocks import NOW, MINUTE, DAY, MockStorage, make_item, cloze_sentence


class TestEnsureToday(unittest.TestCase):

    def setUp(self):
        self.rng = random.Random(11)
        self.items = [make_item('a'), make_item('b', weakness=(1, 0, NOW)), make_item('c')]

    def test_first_draw(self):
        state = ensure_today(None, self.items, NOW, self.rng)
        self.assertEqual(state.date, day_key(NOW))
        self.assertIn(state.target_id, ('id-a', 'id-b', 'id-c'))
        self.assertEqual(state.draft, '')
        self.assertFalse(state.ai_done)

    def test_same_day_keeps_target(self):
        state = ensure_today(None, self.items, NOW, self.rng)
        state.draft = 'Draft.'
        for offset in range(5):
            self.assertIs(ensure_today(state, self.items, NOW + offset * MINUTE, self.rng), state)

    def test_next_day_redraws_and_clears_draft(self):
        state = DailyWriting(day_key(NOW), 'id-a', False, NOW, 'Old draft.', True)
        later = ensure_today(state, self.items, NOW + 2 * DAY, self.rng)
        self.assertEqual(later.date, day_key(NOW + 2 * DAY))
        self.assertEqual(later.draft, '')
        self.assertFalse(later.ai_done)

    def test_exclude_weakness_never_picks_weak_item(self):
        for seed in range(20):
            state = ensure_today(None, self.items, NOW, random.Random(seed), exclude_weakness=True)
            self.assertNotEqual(state.target_id, 'id-b')

    def test_filter_on_keeps_target_that_is_not_weak(self):
        state = DailyWriting(day_key(NOW), 'id-a', False, NOW, 'Draft.')
        updated = ensure_today(state, self.items, NOW, self.rng, exclude_weakness=True)
        self.assertEqual(updated.target_id, 'id-a')
        self.assertTrue(updated.exclude_weakness)
        self.assertEqual(updated.draft, 'Draft.')

    def test_filter_on_replaces_weak_target(self):
        state = DailyWriting(day_key(NOW), 'id-b', False, NOW)
        updated = ensure_today(state, self.items, NOW, self.rng, exclude_weakness=True)
        self.assertIn(updated.target_id, ('id-a', 'id-c'))

    def test_filter_off_redraws(self):
        state = DailyWriting(day_key(NOW), 'id-a', True, NOW, 'Draft.')
        updated = ensure_today(state, self.items, NOW, self.rng, exclude_weakness=False)
        self.assertFalse(updated.exclude_weakness)
        self.assertIsNot(updated, state)
        self.assertEqual(updated.draft, 'Draft.')

    def test_deleted_target_redraws(self):
        state = DailyWriting(day_key(NOW), 'id-gone', False, NOW)
        self.assertIn(ensure_today(state, self.items, NOW, self.rng).target_id, ('id-a', 'id-b', 'id-c'))

    def test_no_items(self):
        self.assertIsNone(ensure_today(None, [], NOW, self.rng).target_id)
        only_weak = [make_item('b', weakness=(1, 0, NOW))]
        self.assertIsNone(ensure_today(None, only_weak, NOW, self.rng, exclude_weakness=True).target_id)

    def test_reshuffle_keeps_draft(self):
        state = DailyWriting(day_key(NOW), 'id-a', False, NOW, 'Draft.')
        updated = reshuffle_today(state, self.items, NOW + MINUTE, self.rng)
        self.assertEqual(updated.draft, 'Draft.')
        self.assertEqual(updated.updated_at, NOW + MINUTE)


class TestDailyWritingTracker(unittest.TestCase):

    def setUp(self):
        self.storage = MockStorage()
        self.tracker = DailyWritingTracker(self.storage, rng=random.Random(2))
        self.items = [make_item('a'), make_item('b')]

    def test_state_is_persisted(self):
        state = self.tracker.today(self.items, NOW)
        stored = self.storage.load_writing()
        self.assertEqual(stored['version'], 1)
        self.assertEqual(stored['targetId'], state.target_id)
        self.assertEqual(stored['dateKey'], day_key(NOW))

        other = DailyWritingTracker(self.storage, rng=random.Random(99))
        self.assertEqual(other.today(self.items, NOW + MINUTE).target_id, state.target_id)

    def test_stored_filter_is_kept(self):
        self.tracker.reshuffle(self.items, NOW, exclude_weakness=True)
        self.assertTrue(self.tracker.today(self.items, NOW).exclude_weakness)

    def test_draft_and_done(self):
        self.tracker.save_draft(self.items, NOW, 'I write.')
        state = self.tracker.mark_done(self.items, NOW + MINUTE)
        self.assertEqual(state.draft, 'I write.')
        self.assertTrue(state.ai_done)
        self.assertTrue(self.storage.load_writing()['aiDone'])

    def test_unreadable_state_is_discarded(self):
        self.storage.save_writing({'version': 7, 'targetId': 'id-a'})
        with self.assertLogs('core.writing', level='ERROR'):
            state = self.tracker.today(self.items, NOW)
        self.assertIn(state.target_id, ('id-a', 'id-b'))
        self.assertEqual(self.storage.load_writing()['version'], 1)


class TestPrompts(unittest.TestCase):

    def test_qa_prompt(self):
        sentences = [cloze_sentence(), Sentence('s2', 'Second.', '二', ['Second', '.']),
                     Sentence('s3', 'Third.', '三', ['Third', '.'])]
        prompt = build_qa_prompt(make_item(sentences=sentences), '  Is it formal? ')
        lines = prompt.split('\n')
        self.assertEqual(lines[:4], ['[Wordloom Q&A]', 'Entry: affect', 'Type: word', 'Meaning(JP): 影響する'])
        self.assertIn('1) The weather can affect your mood. / 天気は気分に影響することがある。', lines)
        self.assertIn('2) Second. / 二', lines)
        self.assertNotIn('Third.', prompt)
        self.assertEqual(lines[-1], 'Is it formal?')

    def test_qa_prompt_placeholders(self):
        prompt = build_qa_prompt(make_item(), '   ')
        self.assertIn('Examples:\n(none)', prompt)
        self.assertTrue(prompt.endswith('My question:\n(no question)'))

    def test_writing_prompt(self):
        item = make_item('give up', 'あきらめる', 'phrase')
        prompt = build_writing_prompt(item, ' I gave up coffee. ')
        self.assertIn('Target: give up (phrase)', prompt)
        self.assertIn('Meaning(JP): あきらめる', prompt)
        self.assertIn('My draft:\nI gave up coffee.\n', prompt)
        self.assertTrue(prompt.endswith('5) One drill'))
        self.assertIn('My draft:\n(empty)', build_writing_prompt(item, ''))


if __name__ == '__main__':
    unittest.main()
