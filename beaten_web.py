#!/usr/bin/env python3
"""
Beaten Games Web - the web interface for logging beaten games.
Lists games, adds them (full form or quick-add), deletes them by name and
autocompletes names from Giant Bomb.
"""

import logging
import argparse
import os
import re
import sys
from typing import Optional
from urllib.parse import unquote_to_bytes

from colorama import Fore
from flask import Flask, render_template, jsonify, request, redirect, url_for
from jinja2 import TemplateError
from werkzeug.exceptions import HTTPException

import beaten
import database
from app.errors import BeatenGamesError, ParseFailure
from app.repositories import GameRepository
from app.services import GameService, SuggestService
from giantbomb_client import GiantBombClient

web_logger = logging.getLogger('beaten.web')

FORM_MIMETYPE = 'application/x-www-form-urlencoded'
_BAD_ESCAPE_RE = re.compile(rb'%(?![0-9A-Fa-f]{2})')

app = Flask(__name__)

# Services are created by initialize() once the configuration is loaded.
game_service: Optional[GameService] = None
suggest_service: Optional[SuggestService] = None


def initialize(config: dict) -> bool:
    """Connect the database and build the services from *config*.

    Returns:
        ``True`` when the database schema is ready.
    """
    global game_service, suggest_service
    beaten.setup_logging(config.get('log_level', 'INFO'))

    database.configure(config['database_url'])
    if not database.init_db():
        return False

    game_service = GameService(GameRepository(database))
    suggest_service = SuggestService(
        GiantBombClient(config['giant_bomb_api_key'], timeout=config.get('search_timeout', 10))
    )
    web_logger.info('Services initialized (database: %s)', config['database_url'])
    return True


def _attach_file_handler(log_dir: str = 'logs') -> None:
    try:
        os.makedirs(log_dir, exist_ok=True)
        fh = logging.FileHandler(os.path.join(log_dir, 'beaten_web.log'))
        fh.setFormatter(logging.Formatter('[%(asctime)s] %(levelname)s %(name)s: %(message)s'))
        logging.getLogger('beaten').addHandler(fh)
    except OSError:
        web_logger.warning('Could not create log file handler')


def _games() -> GameService:
    if game_service is None:
        raise BeatenGamesError('Service not initialized.')
    return game_service


def _suggestions() -> SuggestService:
    if suggest_service is None:
        raise BeatenGamesError('Service not initialized.')
    return suggest_service


def _submitted_form():
    """Return the decoded form body, or raise ParseFailure.

    Urlencoded bodies with a bad percent-escape or invalid UTF-8 are rejected
    before any field is read. ``request.form`` parses the cached body.
    """
    if request.mimetype == FORM_MIMETYPE:
        raw = request.get_data(cache=True)
        if _BAD_ESCAPE_RE.search(raw):
            raise ParseFailure(detail='invalid percent-escape in form body')
        try:
            unquote_to_bytes(raw.replace(b'+', b' ')).decode('utf-8')
        except UnicodeDecodeError as e:
            raise ParseFailure(detail=f'form body is not UTF-8: {e}') from e
    return request.form


def _plain_text(message: str, status: int):
    return message, status, {'Content-Type': 'text/plain; charset=utf-8'}


# ===========================================================================================
# Error handlers
# ===========================================================================================

@app.errorhandler(BeatenGamesError)
def handle_app_error(e: BeatenGamesError):
    """Turn an application error into a plain-text response."""
    if e.status_code >= 500:
        web_logger.error('%s %s failed: %s', request.method, request.path, e, exc_info=e)
    elif isinstance(e, ParseFailure):
        web_logger.warning('%s %s: %s', request.method, request.path, e.message)
    else:
        web_logger.info('%s %s rejected: %s', request.method, request.path, e.message)
    return _plain_text(e.message, e.status_code)


@app.errorhandler(TemplateError)
def handle_template_error(e: TemplateError):
    web_logger.error('Failed to execute template: %s', e, exc_info=e)
    return _plain_text('Failed to execute template.', 500)


@app.errorhandler(HTTPException)
def handle_http_error(e: HTTPException):
    return _plain_text(e.description or e.name, e.code or 500)


@app.errorhandler(Exception)
def handle_unexpected_error(e: Exception):
    web_logger.exception('Unhandled error on %s %s', request.method, request.path)
    return _plain_text('Internal error.', 500)


# ===========================================================================================
# Pages
# ===========================================================================================

# POST is accepted because the add form redirects here with 307.
@app.route('/', methods=['GET', 'POST'])
def index():
    """List all beaten games"""
    games = _games().list_games()
    return render_template('index.html', games=games)


@app.route('/games/<int:game_id>')
def game_detail(game_id: int):
    """Show a single game"""
    game = _games().get_game(game_id)
    return render_template('game.html', game=game)


@app.route('/games/add', methods=['GET', 'POST'])
def add_game():
    """Show the add form, or store a submitted game"""
    if request.method == 'GET':
        return render_template('add.html')

    _games().add(_submitted_form())
    return redirect(url_for('index'), code=307)


# ===========================================================================================
# Actions
# ===========================================================================================

@app.route('/games/quick-add', methods=['POST'])
def quick_add_game():
    """Add a game beaten today, without a note"""
    _games().quick_add(_submitted_form())
    return '', 200


@app.route('/games/delete', methods=['POST'])
def delete_game():
    """Delete every game with the submitted name"""
    form = _submitted_form()
    _games().delete(form.get('name', ''))
    return '', 200


@app.route('/suggest/games')
def suggest_games():
    """Autocomplete game names from Giant Bomb"""
    results = _suggestions().suggest(request.args.get('q'))
    return jsonify(results)


def main():
    """Main entry point for the web interface"""
    parser = argparse.ArgumentParser(description='Beaten Games Web')
    parser.add_argument('--config', default='config.json', help='Path to config file')
    parser.add_argument('--host', default=None, help='Interface to listen on')
    parser.add_argument('--port', type=int, default=None, help='Port to listen on')
    parser.add_argument('--debug', action='store_true', help='Run Flask in debug mode')
    args = parser.parse_args()

    print("Loading configuration...")
    config = beaten.load_config(args.config)
    _attach_file_handler()

    if not initialize(config):
        print(f"{Fore.RED}Error: Failed to initialize database at {config['database_url']}")
        sys.exit(1)

    host = args.host or config['host']
    port = args.port or config['port']
    print(f"Starting server on {host}:{port}...")
    try:
        app.run(host=host, port=port, debug=args.debug)
    except KeyboardInterrupt:
        print("\nBeaten Games stopped")


if __name__ == '__main__':
    main()
