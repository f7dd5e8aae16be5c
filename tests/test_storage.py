"""Unit tests for the storage backends."""

import json
import os
import tempfile
import unittest
from unittest.mock import MagicMock, patch

import psycopg2

from core.errors import StorageError
from core.mastery import MasteryStore
from server.file_storage import FileStorage, load_config
from server.postgres_storage import PostgresStorage


class TestFileStorage(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.state_dir = os.path.join(self.tmp.name, 'state')
        self.storage = FileStorage(self.state_dir)

    def tearDown(self):
        self.tmp.cleanup()

    def test_missing_key(self):
        self.assertIsNone(self.storage.get('current_session'))

    def test_set_get_remove(self):
        value = {'wordPairs': [{'sourceWord': 'perché', 'targetWord': 'pourquoi'}]}
        self.storage.set('current_session', value)
        self.assertEqual(self.storage.get('current_session'), value)
        self.assertEqual(self.storage.keys(), ['current_session'])
        self.storage.remove('current_session')
        self.assertIsNone(self.storage.get('current_session'))
        self.assertEqual(self.storage.keys(), [])

    def test_remove_missing_key(self):
        self.storage.remove('current_focus')

    def test_unicode_written_verbatim(self):
        self.storage.set('translation_direction', 'città')
        with open(os.path.join(self.state_dir, 'translation_direction.json'), encoding='utf-8') as f:
            self.assertIn('città', f.read())

    def test_no_temp_file_left_behind(self):
        self.storage.set('vocabulary_mastery', [])
        self.assertEqual(os.listdir(self.state_dir), ['vocabulary_mastery.json'])

    def test_corrupt_file_reads_as_missing(self):
        os.makedirs(self.state_dir)
        with open(os.path.join(self.state_dir, 'current_focus.json'), 'w') as f:
            f.write('{"focusInstruction": ')
        self.assertIsNone(self.storage.get('current_focus'))

    def test_corrupt_file_kept_aside_when_key_is_rewritten(self):
        os.makedirs(self.state_dir)
        with open(os.path.join(self.state_dir, 'vocabulary_mastery.json'), 'w') as f:
            f.write('[{"id": "casa_maison", ')
        self.assertIsNone(self.storage.get('vocabulary_mastery'))

        self.storage.set('vocabulary_mastery', [])

        with open(os.path.join(self.state_dir, 'vocabulary_mastery.json.corrupt')) as f:
            self.assertEqual(f.read(), '[{"id": "casa_maison", ')
        self.assertEqual(self.storage.get('vocabulary_mastery'), [])
        self.assertEqual(self.storage.keys(), ['vocabulary_mastery'])

    def test_invalid_key_rejected(self):
        with self.assertRaises(ValueError):
            self.storage.get('../etc/passwd')

    def test_unserializable_value(self):
        with self.assertRaises(StorageError):
            self.storage.set('current_session', {'bad': object()})

    def test_state_dir_from_environment(self):
        with patch.dict(os.environ, {'LESSICO_STATE_DIR': self.state_dir}):
            self.assertEqual(FileStorage().state_dir, self.state_dir)

    def test_mastery_persists_across_instances(self):
        MasteryStore(self.storage).track_word('casa', 'maison', 'vocabulary', 'Tourisme', True)
        reloaded = MasteryStore(FileStorage(self.state_dir)).get('casa_maison')
        self.assertEqual(reloaded.times_reviewed, 1)
        self.assertEqual(reloaded.mastery_level, 1)


class TestLoadConfig(unittest.TestCase):

    def test_missing_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(FileNotFoundError):
                load_config(os.path.join(tmp, 'config.json'))

    def test_reads_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'config.json')
            with open(path, 'w') as f:
                json.dump({'gemini_api_key': 'abc'}, f)
            self.assertEqual(load_config(path), {'gemini_api_key': 'abc'})


class TestPostgresStorage(unittest.TestCase):

    def setUp(self):
        patcher = patch('server.postgres_storage.psycopg2.connect')
        self.connect = patcher.start()
        self.addCleanup(patcher.stop)
        self.conn = MagicMock()
        self.conn.closed = False
        self.cursor = self.conn.cursor.return_value.__enter__.return_value
        self.connect.return_value = self.conn
        self.storage = PostgresStorage('postgresql://test/lessico', user_id='alice')

    def test_connects_lazily_and_creates_table(self):
        self.connect.assert_not_called()
        self.cursor.fetchone.return_value = None
        self.storage.get('current_focus')
        self.connect.assert_called_once_with('postgresql://test/lessico')
        statements = [c[0][0] for c in self.cursor.execute.call_args_list]
        self.assertIn('CREATE TABLE IF NOT EXISTS kv_store', statements[0])

    def test_get_returns_value(self):
        self.cursor.fetchone.return_value = ({'focusInstruction': 'cucina'},)
        self.assertEqual(self.storage.get('current_focus'), {'focusInstruction': 'cucina'})
        self.assertEqual(self.cursor.execute.call_args[0][1], ('alice', 'current_focus'))

    def test_set_commits(self):
        self.storage.set('translation_direction', 'target_to_source')
        self.assertEqual(self.cursor.execute.call_args[0][1][:2], ('alice', 'translation_direction'))
        self.conn.commit.assert_called()

    def test_database_error_rolls_back(self):
        self.storage.conn
        self.cursor.execute.side_effect = psycopg2.OperationalError('server closed the connection')
        with self.assertRaises(StorageError):
            self.storage.remove('current_session')
        self.conn.rollback.assert_called_once()

    def test_connection_error(self):
        self.connect.side_effect = psycopg2.OperationalError('no route to host')
        with self.assertRaises(StorageError):
            self.storage.get('current_session')


if __name__ == '__main__':
    unittest.main()
