"""API tests for the lessico server, backed by in-memory collaborators."""

import unittest
from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient

from core.errors import GenerationFailed
from server.app import Services, create_app

from mocks import MemoryStore, MockRecommender, MockWordGenerator, pair


class TestApp(unittest.TestCase):

    def setUp(self):
        self.store = MemoryStore()
        self.generator = MockWordGenerator()
        self.recommender = MockRecommender()
        self.services = Services(self.store, self.generator, self.recommender)
        self.client = TestClient(create_app(self.services))

    def track(self, word, translation, topic='Tourisme', is_correct=True):
        return self.client.post('/api/mastery/track', json={
            'word': word, 'translation': translation, 'category': 'vocabulary',
            'topic': topic, 'is_correct': is_correct
        })

    def test_health(self):
        self.assertEqual(self.client.get('/').json(), {'service': 'lessico', 'status': 'ok'})

    def test_start_session(self):
        response = self.client.post('/api/session', json={'topic': 'Tourisme', 'total_count': 4})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(len(data['wordPairs']), 4)
        self.assertEqual(data['reviewCount'], 0)
        self.assertEqual(data['translationDirection'], 'source_to_target')
        self.assertEqual(self.client.get('/api/session').json()['wordPairs'], data['wordPairs'])

    def test_session_mixes_review_words(self):
        self.track('spiaggia', 'plage')
        self.track('albergo', 'hôtel')
        data = self.client.post('/api/session', json={'topic': 'Tourisme', 'total_count': 6}).json()
        self.assertEqual(data['reviewCount'], 2)
        self.assertEqual([p['sourceWord'] for p in data['wordPairs'][:2]], ['spiaggia', 'albergo'])
        self.assertEqual(self.generator.calls[0]['count'], 4)

    def test_session_response_uses_composed_result(self):
        with patch.object(self.services.session_store, 'load', return_value=None):
            response = self.client.post('/api/session', json={'topic': 'Tourisme', 'total_count': 4})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()['wordPairs']), 4)

    def test_recommender_crash_still_composes(self):
        for i in range(8):
            self.track(f'parola{i}', f'mot{i}')
        self.services.review_selector.recommender = MockRecommender(error=RuntimeError('connection reset'))
        response = self.client.post('/api/session', json={'topic': 'Tourisme', 'total_count': 10})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['reviewCount'], 5)

    def test_writes_are_serialized_with_compose(self):
        lock = MagicMock()
        self.services.compose_lock = lock
        self.client.post('/api/focus', json={'instruction': 'verbi riflessivi'})
        self.client.delete('/api/focus')
        self.track('spiaggia', 'plage')
        self.client.post('/api/dictionary', json={'sourceWord': 'casa', 'targetWord': 'maison'})
        self.client.put('/api/preferences/direction', json={'direction': 'target_to_source'})
        self.assertEqual(lock.__aenter__.call_count, 5)
        self.assertEqual(lock.__aexit__.call_count, 5)

    def test_no_session_yet(self):
        self.assertEqual(self.client.get('/api/session').status_code, 404)

    def test_generation_failure(self):
        self.generator.queue(GenerationFailed('model overloaded'))
        response = self.client.post('/api/session', json={'topic': 'Tourisme', 'total_count': 4})
        self.assertEqual(response.status_code, 502)
        self.assertIn('model overloaded', response.json()['detail'])
        self.assertEqual(self.client.get('/api/session').status_code, 404)

    def test_invalid_total_count(self):
        response = self.client.post('/api/session', json={'topic': 'Tourisme', 'total_count': 0})
        self.assertEqual(response.status_code, 422)
        self.assertEqual(self.generator.calls, [])

    def test_mastery_lifecycle(self):
        record = self.track('spiaggia', 'plage', is_correct=False).json()
        self.assertEqual(record['id'], 'spiaggia_plage')
        self.assertEqual(record['masteryLevel'], 0)

        reviewed = self.client.post('/api/mastery/spiaggia_plage/review', json={'success': True}).json()
        self.assertEqual(reviewed['masteryLevel'], 1)
        self.assertEqual(reviewed['timesReviewed'], 2)

        updated = self.client.put('/api/mastery/spiaggia_plage', json={'context': 'in spiaggia'}).json()
        self.assertEqual(updated['context'], 'in spiaggia')

        words = self.client.get('/api/mastery', params={'category': 'vocabulary', 'topic': 'Tourisme'}).json()
        self.assertEqual(len(words['words']), 1)

        self.assertEqual(self.client.delete('/api/mastery/spiaggia_plage').status_code, 200)
        self.assertEqual(self.client.get('/api/mastery').json(), {'words': []})

    def test_unknown_mastery_record(self):
        response = self.client.post('/api/mastery/missing/review', json={'success': True})
        self.assertEqual(response.status_code, 404)

    def test_track_requires_word(self):
        self.assertEqual(self.track('', 'plage').status_code, 400)

    def test_focus_flow(self):
        self.assertEqual(self.client.get('/api/focus').json(), {'active': False, 'session': None})
        self.client.post('/api/focus', json={'instruction': 'verbi riflessivi'})

        first = self.client.post('/api/session', json={'topic': 'Tourisme', 'total_count': 3}).json()
        self.assertTrue(first['focus'])
        self.assertEqual(first['topic'], 'verbi riflessivi')
        second = self.client.post('/api/session', json={'topic': 'Tourisme', 'total_count': 3}).json()
        self.assertEqual(second['wordPairs'], first['wordPairs'])
        self.assertEqual(len(self.generator.calls), 1)

        focus = self.client.get('/api/focus').json()
        self.assertEqual(len(focus['session']['words']), 3)

        self.assertEqual(self.client.delete('/api/focus').json(), {'active': False})
        history = self.client.get('/api/focus/history').json()['sessions']
        self.assertEqual(history[0]['focusInstruction'], 'verbi riflessivi')

    def test_blank_focus_rejected(self):
        self.assertEqual(self.client.post('/api/focus', json={'instruction': '  '}).status_code, 400)

    def test_dictionary(self):
        added = self.client.post('/api/dictionary', json={
            'sourceWord': 'casa', 'targetWord': 'maison', 'themes': ['home']
        }).json()
        self.assertEqual(added, {'success': True})
        duplicate = self.client.post('/api/dictionary', json={'sourceWord': 'CASA', 'targetWord': 'Maison'}).json()
        self.assertFalse(duplicate['success'])

        data = self.client.get('/api/dictionary').json()
        self.assertEqual(data['themes'], {'home': 1})
        entry = data['words'][0]

        edited = dict(entry, contextualMeaning='habitation')
        self.assertEqual(self.client.put(f"/api/dictionary/{entry['id']}", json=edited).json(), {'success': True})

        session = self.client.post('/api/session', json={'topic': 'Personnel'}).json()
        self.assertEqual(session['wordPairs'], [pair('casa', 'maison', 'habitation').to_dict()])
        self.assertEqual(self.generator.calls, [])

        self.assertEqual(self.client.delete(f"/api/dictionary/{entry['id']}").status_code, 200)
        self.assertEqual(self.client.delete(f"/api/dictionary/{entry['id']}").status_code, 404)

    def test_empty_dictionary_session(self):
        response = self.client.post('/api/session', json={'topic': 'Personnel'})
        self.assertEqual(response.status_code, 404)

    def test_direction_preference(self):
        self.assertEqual(self.client.get('/api/preferences/direction').json(), {'direction': 'source_to_target'})
        self.client.put('/api/preferences/direction', json={'direction': 'target_to_source'})
        data = self.client.post('/api/session', json={'topic': 'Tourisme', 'total_count': 2}).json()
        self.assertEqual(data['translationDirection'], 'target_to_source')
        self.assertEqual(self.client.put('/api/preferences/direction', json={'direction': 'up'}).status_code, 422)


if __name__ == '__main__':
    unittest.main()
