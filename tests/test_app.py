"""API tests for the wordloom server."""

import unittest

from fastapi.testclient import TestClient

import server.app as app_module
from tests.mocks import NOW, DAY, MockStorage, FixedClock, make_item, cloze_sentence


class APITestCase(unittest.TestCase):

    def setUp(self):
        self.storage = MockStorage()
        self.clock = FixedClock()
        app_module.storage = self.storage
        app_module.clock = self.clock
        app_module.user_services.clear()
        app_module.study_sessions.clear()
        app_module.writing_trackers.clear()
        self.client = TestClient(app_module.app)

    def seed(self, *items, user_id='default'):
        self.storage.save_items([item.to_dict() for item in items], user_id)


class TestHealthAndUsers(APITestCase):

    def test_root(self):
        response = self.client.get('/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['service'], 'wordloom')

    def test_list_users(self):
        self.seed(make_item(), user_id='alice')
        self.assertEqual(self.client.get('/api/users').json(), {'users': ['alice']})


class TestWordEndpoints(APITestCase):

    def test_create_and_fetch(self):
        response = self.client.post('/api/words', json={
            'word': 'affect',
            'meaning': '影響する',
            'sentences': [{'en': 'The weather can affect your mood.', 'ja': '天気', 's5': [3]}]
        })
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['currentStage'], 0)
        self.assertEqual(data['dueAt'], NOW)
        self.assertEqual(data['sentences'][0]['tokens'][3], 'affect')

        fetched = self.client.get(f"/api/words/{data['id']}").json()
        self.assertEqual(fetched, data)
        self.assertEqual(len(self.client.get('/api/words').json()['words']), 1)
        self.assertTrue(any(e[0] == 'word.create' for e in self.storage.events))

    def test_create_rejects_bad_input(self):
        bad_index = self.client.post('/api/words', json={
            'word': 'affect', 'meaning': 'x', 'sentences': [{'en': 'Hi.', 's5': [7]}]})
        self.assertEqual(bad_index.status_code, 400)
        bad_type = self.client.post('/api/words', json={
            'word': 'affect', 'meaning': 'x', 'entry_type': 'idiom'})
        self.assertEqual(bad_type.status_code, 400)

    def test_update_keeps_progress(self):
        self.seed(make_item(stage=3, streak=1, stability=5))
        response = self.client.put('/api/words/id-affect', json={
            'word': 'affect', 'meaning': '作用する'})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['meaning'], '作用する')
        self.assertEqual((data['currentStage'], data['stageStreak'], data['stability']), (3, 1, 5))
        self.assertEqual(data['updatedAt'], NOW)

    def test_missing_word(self):
        self.assertEqual(self.client.get('/api/words/nope').status_code, 404)
        self.assertEqual(self.client.put('/api/words/nope', json={
            'word': 'a', 'meaning': 'b'}).status_code, 404)
        self.assertEqual(self.client.delete('/api/words/nope').status_code, 404)

    def test_delete(self):
        self.seed(make_item())
        self.assertEqual(self.client.delete('/api/words/id-affect').status_code, 200)
        self.assertEqual(self.client.get('/api/words').json()['words'], [])


class TestStudyEndpoints(APITestCase):

    def start(self, mode='normal', **extra):
        response = self.client.post('/api/sessions', json={'mode': mode, **extra})
        self.assertEqual(response.status_code, 200)
        return response.json()

    def test_normal_session_flow(self):
        self.seed(make_item(stage=3))
        session = self.start()
        self.assertEqual(session['target'], 1)
        self.assertIsNone(session['message'])

        data = self.client.get(f"/api/sessions/{session['session_id']}/question").json()
        question = data['question']
        self.assertEqual(question['stage'], 3)
        self.assertEqual(question['prompt'], '影響する')
        self.assertNotIn('expected', question)

        result = self.client.post(f"/api/sessions/{session['session_id']}/answer",
                                  json={'answer': 'affect'}).json()
        self.assertTrue(result['correct'])
        self.assertTrue(result['persisted'])
        self.assertEqual(result['item']['stageStreak'], 1)
        self.assertTrue(result['session']['finished'])

        done = self.client.get(f"/api/sessions/{session['session_id']}/question").json()
        self.assertIsNone(done['question'])
        finished = self.client.post(f"/api/sessions/{session['session_id']}/answer",
                                    json={'answer': 'affect'})
        self.assertEqual(finished.status_code, 400)

    def test_empty_session_has_message(self):
        session = self.start('weakness')
        self.assertEqual(session['target'], 0)
        self.assertTrue(session['finished'])
        self.assertIn('normal study', session['message'])

    def test_unknown_mode(self):
        response = self.client.post('/api/sessions', json={'mode': 'quiz'})
        self.assertEqual(response.status_code, 400)

    def test_unknown_session(self):
        self.assertEqual(self.client.get('/api/sessions/nope/question').status_code, 404)

    def test_unconfigured_stage_conflict_then_skip(self):
        self.seed(make_item(stage=6))
        session = self.start()
        question = self.client.get(f"/api/sessions/{session['session_id']}/question").json()['question']
        self.assertFalse(question['available'])
        self.assertTrue(question['reason'])

        answer = self.client.post(f"/api/sessions/{session['session_id']}/answer",
                                  json={'answer': 'affect'})
        self.assertEqual(answer.status_code, 409)

        skipped = self.client.post(f"/api/sessions/{session['session_id']}/skip").json()
        self.assertTrue(skipped['finished'])
        self.assertEqual(skipped['answered'], 0)

    def test_challenge_does_not_persist(self):
        self.seed(make_item(stage=3, stability=15, due_at=NOW + DAY))
        session = self.start('challenge')
        self.assertEqual(session['target'], 1)
        result = self.client.post(f"/api/sessions/{session['session_id']}/answer",
                                  json={'answer': 'wrong'}).json()
        self.assertFalse(result['correct'])
        self.assertFalse(result['persisted'])
        stored = self.client.get('/api/words/id-affect').json()
        self.assertNotIn('weakness', stored)
        self.assertEqual(stored['dueAt'], NOW + DAY)

    def test_self_judge_answer(self):
        self.seed(make_item(stage=7, sentences=[cloze_sentence()]))
        session = self.start()
        result = self.client.post(f"/api/sessions/{session['session_id']}/answer",
                                  json={'correct': True}).json()
        self.assertTrue(result['correct'])
        self.assertEqual(result['expected'], ['The weather can affect your mood.'])

    def test_limit_is_clamped(self):
        self.seed(*[make_item(f'w{i}') for i in range(5)])
        self.assertEqual(self.start(limit=2)['target'], 2)
        self.assertEqual(self.start(limit=0)['target'], 1)

    def test_question_reports_answer_kind(self):
        self.seed(make_item(stage=3))
        session = self.start()
        question = self.client.get(f"/api/sessions/{session['session_id']}/question").json()['question']
        self.assertEqual(question['kind'], 'typed')

    def test_empty_answer_is_rejected(self):
        self.seed(make_item(stage=3))
        session = self.start()
        response = self.client.post(f"/api/sessions/{session['session_id']}/answer", json={})
        self.assertEqual(response.status_code, 400)

        stored = self.client.get('/api/words/id-affect').json()
        self.assertNotIn('weakness', stored)
        self.assertEqual(stored['dueAt'], NOW)
        self.assertEqual(self.client.get('/api/dashboard').json()['today_progress'], 0)
        question = self.client.get(f"/api/sessions/{session['session_id']}/question").json()
        self.assertEqual(question['question']['item_id'], 'id-affect')

    def test_new_session_replaces_previous_one(self):
        self.seed(make_item())
        self.seed(make_item(), user_id='bob')
        other = self.start(user_id='bob')
        first = self.start()
        for _ in range(49):
            self.start()
        self.assertEqual(len(app_module.study_sessions), 2)
        self.assertEqual(
            self.client.get(f"/api/sessions/{first['session_id']}/question").status_code, 404)
        self.assertEqual(
            self.client.get(f"/api/sessions/{other['session_id']}/question").status_code, 200)

    def test_imported_null_fields_still_study(self):
        record = {'id': 'w1', 'word': 'affect', 'meaning': '影響する', 'entryType': 'word',
                  'sentences': [], 'stability': None, 'dueAt': None, 'currentStage': None,
                  'stageStreak': None, 'createdAt': NOW - DAY, 'updatedAt': NOW - DAY}
        response = self.client.post('/api/import', json={'version': 1, 'words': [record]})
        self.assertEqual(response.status_code, 200)

        dashboard = self.client.get('/api/dashboard')
        self.assertEqual(dashboard.status_code, 200)
        self.assertEqual(dashboard.json()['due_now'], 1)
        self.start('challenge')

        session = self.start()
        self.assertEqual(session['target'], 1)
        result = self.client.post(f"/api/sessions/{session['session_id']}/answer",
                                  json={'answer': '影響する'}).json()
        self.assertTrue(result['correct'])
        self.assertAlmostEqual(result['item']['stability'], 1.15)
        self.assertEqual(result['item']['currentStage'], 0)


class TestDashboardAndTransfer(APITestCase):

    def test_dashboard(self):
        self.seed(make_item('a', weakness=(0, 0, NOW)), make_item('b', due_at=NOW + DAY, stage=6))
        data = self.client.get('/api/dashboard').json()
        self.assertEqual(data['total_words'], 2)
        self.assertEqual(data['weak_words'], 1)
        self.assertEqual(data['due_now'], 1)
        self.assertEqual(data['upcoming'], 1)
        self.assertEqual(data['learned'], 1)
        self.assertEqual(data['today_progress'], 0)
        self.assertEqual(data['daily_goal'], 20)

    def test_export_then_import(self):
        self.seed(make_item('a'), make_item('b', weakness=(2, 1, NOW)))
        exported = self.client.get('/api/export').json()
        self.assertEqual(exported['version'], 1)
        self.assertEqual(exported['exportedAt'], NOW)

        response = self.client.post('/api/import', params={'user_id': 'bob'}, json=exported)
        self.assertEqual(response.json(), {'success': True, 'count': 2})
        words = self.client.get('/api/words', params={'user_id': 'bob'}).json()['words']
        self.assertEqual(words, exported['words'])

    def test_import_rejects_bad_payload(self):
        self.seed(make_item())
        response = self.client.post('/api/import', json={'version': 9, 'words': []})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['detail'], 'Invalid file format')
        self.assertEqual(len(self.client.get('/api/words').json()['words']), 1)

    def test_recent_events_without_event_log(self):
        self.assertEqual(self.client.get('/api/events/recent').json(), {'events': []})


class TestWritingEndpoints(APITestCase):

    def test_today_is_stable_within_a_day(self):
        self.seed(make_item('a'), make_item('b'), make_item('c'))
        first = self.client.get('/api/writing/today').json()
        self.assertIn(first['target']['id'], ('id-a', 'id-b', 'id-c'))
        self.assertEqual(first['draft'], '')
        self.assertIsNone(first['prompt'])
        for _ in range(5):
            self.assertEqual(self.client.get('/api/writing/today').json()['target'], first['target'])

    def test_exclude_weakness(self):
        self.seed(make_item('a', weakness=(0, 0, NOW)), make_item('b'))
        for _ in range(5):
            data = self.client.post('/api/writing/reshuffle', json={'exclude_weakness': True}).json()
            self.assertEqual(data['target']['id'], 'id-b')
            self.assertTrue(data['exclude_weakness'])
        self.assertTrue(self.client.get('/api/writing/today').json()['exclude_weakness'])

    def test_draft_builds_prompt_and_done_is_logged(self):
        self.seed(make_item())
        data = self.client.put('/api/writing/draft', json={'draft': 'It affects me.'}).json()
        self.assertEqual(data['draft'], 'It affects me.')
        self.assertIn('Target: affect (word)', data['prompt'])
        self.assertIn('It affects me.', data['prompt'])
        self.assertFalse(data['ai_done'])

        done = self.client.post('/api/writing/done', json={}).json()
        self.assertTrue(done['ai_done'])
        self.assertEqual(done['draft'], 'It affects me.')
        self.assertTrue(any(e[0] == 'writing.done' for e in self.storage.events))

    def test_new_day_clears_draft(self):
        self.seed(make_item())
        self.client.put('/api/writing/draft', json={'draft': 'Yesterday.'})
        self.clock.now = NOW + 2 * DAY
        data = self.client.get('/api/writing/today').json()
        self.assertEqual(data['draft'], '')
        self.assertFalse(data['ai_done'])

    def test_no_words(self):
        data = self.client.get('/api/writing/today').json()
        self.assertIsNone(data['target'])
        self.assertIsNone(data['prompt'])

    def test_qa_prompt(self):
        self.seed(make_item(sentences=[cloze_sentence()]))
        response = self.client.post('/api/words/id-affect/qa-prompt', json={'question': 'Noun form?'})
        self.assertEqual(response.status_code, 200)
        prompt = response.json()['prompt']
        self.assertIn('Entry: affect', prompt)
        self.assertIn('The weather can affect your mood.', prompt)
        self.assertTrue(prompt.endswith('Noun form?'))
        missing = self.client.post('/api/words/nope/qa-prompt', json={'question': 'x'})
        self.assertEqual(missing.status_code, 404)


if __name__ == '__main__':
    unittest.main()
