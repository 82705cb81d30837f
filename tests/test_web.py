#!/usr/bin/env python3
"""
Tests for the Flask routes in beaten_web.py.

The routes run against an in-memory SQLite database; the Giant Bomb client
is replaced by a mock so no real HTTP is made.

Run with:
    python -m pytest tests/test_web.py
"""
import datetime
import json
import os
import sys
import unittest
from unittest.mock import MagicMock, patch

from jinja2 import TemplateError

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import beaten_web
import database
from app.errors import SearchError, StorageError
from app.records import BeatenOn, Game, Note
from app.repositories import GameRepository
from app.services import GameService, SuggestService


class WebTestCase(unittest.TestCase):

    def setUp(self):
        database.configure('sqlite://')
        database.init_db()
        self.repo = GameRepository(database)
        self.search_client = MagicMock()
        self.search_client.search.return_value = []

        patcher_games = patch.object(beaten_web, 'game_service', GameService(self.repo))
        patcher_suggest = patch.object(beaten_web, 'suggest_service',
                                       SuggestService(self.search_client))
        patcher_games.start()
        patcher_suggest.start()
        self.addCleanup(patcher_games.stop)
        self.addCleanup(patcher_suggest.stop)

        beaten_web.app.config['TESTING'] = True
        self.client = beaten_web.app.test_client()

    def tearDown(self):
        database.Base.metadata.drop_all(database.engine)
        database.engine.dispose()


# ===========================================================================
# Pages
# ===========================================================================

class TestIndex(WebTestCase):

    def test_empty_listing(self):
        resp = self.client.get('/')
        self.assertEqual(resp.status_code, 200)
        self.assertIn(b'Nothing beaten yet', resp.data)

    def test_lists_games(self):
        self.repo.insert(Game(name='Celeste', beaten_on=BeatenOn.of(datetime.date(2021, 3, 14))))
        self.repo.insert(Game(name='Hades', note=Note.of('Finally!')))
        resp = self.client.get('/')
        self.assertEqual(resp.status_code, 200)
        self.assertIn(b'Celeste', resp.data)
        self.assertIn(b'2021-03-14', resp.data)
        self.assertIn(b'Finally!', resp.data)

    def test_absent_date_renders_unknown(self):
        self.repo.insert(Game(name='Celeste'))
        resp = self.client.get('/')
        self.assertIn(b'<td>unknown</td>', resp.data)

    def test_storage_failure_is_500_without_details(self):
        database.Base.metadata.drop_all(database.engine)
        resp = self.client.get('/')
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.data, b'Failed to list games.')
        self.assertTrue(resp.content_type.startswith('text/plain'))

    def test_template_failure_is_500(self):
        with patch('beaten_web.render_template', side_effect=TemplateError('boom')):
            resp = self.client.get('/')
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.data, b'Failed to execute template.')
        self.assertTrue(resp.content_type.startswith('text/plain'))


class TestGameDetail(WebTestCase):

    def test_shows_game(self):
        game_id = self.repo.insert(Game(name='Celeste', note=Note.of('B-sides next')))
        resp = self.client.get(f'/games/{game_id}')
        self.assertEqual(resp.status_code, 200)
        self.assertIn(b'Celeste', resp.data)
        self.assertIn(b'B-sides next', resp.data)

    def test_unknown_game_is_404(self):
        resp = self.client.get('/games/12345')
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.data, b"Can't find this game.")

    def test_non_numeric_id_is_404(self):
        resp = self.client.get('/games/abc')
        self.assertEqual(resp.status_code, 404)


class TestAddForm(WebTestCase):

    def test_get_renders_form(self):
        resp = self.client.get('/games/add')
        self.assertEqual(resp.status_code, 200)
        self.assertIn(b'name="beaten_on"', resp.data)

    def test_post_redirects_to_index(self):
        resp = self.client.post('/games/add', data={
            'name': 'Hades', 'note': '', 'beaten_on': '2020-12-10',
        })
        self.assertEqual(resp.status_code, 307)
        self.assertTrue(resp.headers['Location'].endswith('/'))

    def test_post_without_note_stores_empty_note(self):
        self.client.post('/games/add', data={'name': 'Hades', 'beaten_on': '2020-12-10'})
        games = self.repo.list_all()
        self.assertEqual(len(games), 1)
        self.assertEqual(games[0].note, Note.of(''))
        self.assertEqual(games[0].beaten_on.unwrap(), datetime.date(2020, 12, 10))

    def test_post_followed_redirect_lists_game(self):
        resp = self.client.post('/games/add', data={'name': 'Hades', 'beaten_on': ''},
                                follow_redirects=True)
        self.assertEqual(resp.status_code, 200)
        self.assertIn(b'Hades', resp.data)

    def test_bad_date_is_400_and_stores_nothing(self):
        resp = self.client.post('/games/add', data={'name': 'Hades', 'beaten_on': 'not-a-date'})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data, b'Failed to parse date.')
        self.assertEqual(self.repo.list_all(), [])

    def test_empty_name_is_400(self):
        resp = self.client.post('/games/add', data={'name': '', 'beaten_on': ''})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(self.repo.list_all(), [])

    def test_malformed_body_is_400_and_stores_nothing(self):
        resp = self.client.post('/games/add', data='name=Hades&note=100%&beaten_on=',
                                content_type='application/x-www-form-urlencoded')
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data, b'Failed to parse submitted form.')
        self.assertEqual(self.repo.list_all(), [])

    def test_add_is_logged_once(self):
        with self.assertLogs('beaten', level='INFO') as logs:
            self.client.post('/games/add', data={'name': 'Hades', 'beaten_on': ''})
        added = [line for line in logs.output if 'Added game' in line]
        self.assertEqual(len(added), 1)


# ===========================================================================
# Actions
# ===========================================================================

class TestQuickAdd(WebTestCase):

    def test_stores_game_beaten_today(self):
        resp = self.client.post('/games/quick-add', data={'name': 'Celeste'})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data, b'')
        game = self.repo.list_all()[0]
        self.assertEqual(game.name, 'Celeste')
        self.assertFalse(game.note.is_present())
        self.assertEqual(game.beaten_on.unwrap(), datetime.date.today())

    def test_get_not_allowed(self):
        resp = self.client.get('/games/quick-add')
        self.assertEqual(resp.status_code, 405)

    def test_missing_name_is_400(self):
        resp = self.client.post('/games/quick-add', data={})
        self.assertEqual(resp.status_code, 400)

    def _post_raw(self, body):
        return self.client.post('/games/quick-add', data=body,
                                content_type='application/x-www-form-urlencoded')

    def test_percent_encoded_utf8_name(self):
        resp = self._post_raw('name=Pok%C3%A9mon+Red')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.repo.list_all()[0].name, 'Pokémon Red')

    def test_bad_percent_escape_is_400(self):
        resp = self._post_raw('name=%zz')
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data, b'Failed to parse submitted form.')
        self.assertEqual(self.repo.list_all(), [])

    def test_truncated_percent_escape_is_400(self):
        resp = self._post_raw('name=Celeste%2')
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(self.repo.list_all(), [])

    def test_invalid_utf8_is_400(self):
        resp = self._post_raw('name=%FF%FE')
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data, b'Failed to parse submitted form.')
        self.assertEqual(self.repo.list_all(), [])

    def test_oversized_body_keeps_413(self):
        with patch.dict(beaten_web.app.config, {'MAX_CONTENT_LENGTH': 16}):
            resp = self._post_raw('name=' + 'x' * 64)
        self.assertEqual(resp.status_code, 413)
        self.assertEqual(self.repo.list_all(), [])

    def test_storage_failure_is_500(self):
        with patch.object(self.repo, 'insert', side_effect=StorageError('Failed to add a game.')):
            resp = self.client.post('/games/quick-add', data={'name': 'Celeste'})
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.data, b'Failed to add a game.')


class TestDelete(WebTestCase):

    def test_deletes_game(self):
        self.repo.insert(Game(name='Celeste'))
        resp = self.client.post('/games/delete', data={'name': 'Celeste'})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data, b'')
        self.assertEqual(self.repo.list_all(), [])

    def test_deletes_every_game_with_that_name(self):
        self.repo.insert(Game(name='Tetris'))
        self.repo.insert(Game(name='Tetris'))
        resp = self.client.post('/games/delete', data={'name': 'Tetris'})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.repo.list_all(), [])

    def test_unknown_name_is_400(self):
        self.repo.insert(Game(name='Celeste'))
        resp = self.client.post('/games/delete', data={'name': 'Hades'})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data, b"Can't find this game.")
        self.assertEqual(len(self.repo.list_all()), 1)


class TestSuggest(WebTestCase):

    def test_returns_json(self):
        self.search_client.search.return_value = [
            {'id': 56733, 'name': 'Celeste',
             'platforms': [{'id': 94, 'name': 'PC', 'abbreviation': 'PC'}]},
        ]
        resp = self.client.get('/suggest/games?q=cele')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.content_type, 'application/json')
        data = json.loads(resp.data)
        self.assertEqual(data[0]['name'], 'Celeste')
        self.search_client.search.assert_called_once_with('cele', limit=10, page=1)

    def test_missing_query_is_400_without_remote_call(self):
        resp = self.client.get('/suggest/games')
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data, b'Query is empty.')
        self.search_client.search.assert_not_called()

    def test_empty_query_is_400(self):
        resp = self.client.get('/suggest/games?q=')
        self.assertEqual(resp.status_code, 400)
        self.search_client.search.assert_not_called()

    def test_search_failure_is_500(self):
        self.search_client.search.side_effect = SearchError(detail='Giant Bomb API error 502')
        resp = self.client.get('/suggest/games?q=cele')
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.data, b'Search failed.')


# ===========================================================================
# Wiring
# ===========================================================================

class TestUninitialized(unittest.TestCase):

    def setUp(self):
        beaten_web.app.config['TESTING'] = True
        self.client = beaten_web.app.test_client()

    def test_routes_fail_cleanly_before_initialize(self):
        with patch.object(beaten_web, 'game_service', None):
            resp = self.client.get('/')
        self.assertEqual(resp.status_code, 500)


class TestInitialize(unittest.TestCase):

    def tearDown(self):
        database.Base.metadata.drop_all(database.engine)
        database.engine.dispose()

    def test_builds_services_from_config(self):
        config = {
            'giant_bomb_api_key': 'key',
            'database_url': 'sqlite://',
            'log_level': 'WARNING',
            'search_timeout': 5,
        }
        with patch.object(beaten_web, 'game_service', None), \
                patch.object(beaten_web, 'suggest_service', None):
            self.assertTrue(beaten_web.initialize(config))
            self.assertIsInstance(beaten_web.game_service, GameService)
            self.assertIsInstance(beaten_web.suggest_service, SuggestService)
            self.assertEqual(beaten_web.game_service.list_games(), [])


class TestStaticFiles(WebTestCase):

    def test_serves_stylesheet(self):
        resp = self.client.get('/static/style.css')
        self.assertEqual(resp.status_code, 200)
        resp.close()


if __name__ == '__main__':
    unittest.main()
