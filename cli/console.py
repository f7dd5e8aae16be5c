"""Console UI for lessico application."""

import requests

from core.config import DEFAULT_SESSION_SIZE, PERSONAL_TOPIC
from cli.api_client import LessicoAPIClient

TOPICS = ['Tourisme', 'Nourriture', 'Travail', 'Transport', 'Loisirs', PERSONAL_TOPIC]

HELP = """Commands:
  start <topic> [count]   start a vocabulary session (topics: {topics})
  conj <tense> [count]    start a conjugation session
  again                   replay the current session
  focus <instruction>     enter focus mode
  unfocus                 leave focus mode
  add <word> = <translation> [; meaning]
  dict                    list the personal dictionary
  words                   list tracked words
  direction               switch translation direction
  help, exit"""


def normalize_answer(text: str) -> str:
    return ' '.join(text.strip().lower().split())


class ConsoleUI:
    """Console user interface for lessico application."""

    def __init__(self, client: LessicoAPIClient):
        self.client = client

    def print_session_header(self, session: dict):
        print('\n' + '=' * 50)
        if session.get('focus'):
            print(f"FOCUS: {session['topic']}")
        else:
            print(f"SESSION: {session['category']} / {session['topic']}")
        pairs = session['wordPairs']
        review_count = session.get('reviewCount', 0)
        print(f"{len(pairs)} words ({review_count} review, {len(pairs) - review_count} new)")
        print('=' * 50)

    def print_tracked_words(self, words: list):
        if not words:
            print('No tracked words yet.')
            return
        print(f"\n{'Word':<20} {'Translation':<20} {'Level':<6} {'Reviews':<8}")
        print('-' * 56)
        for w in words:
            print(f"{w['word']:<20} {w['translation']:<20} {w['masteryLevel']:<6} {w['timesReviewed']:<8}")

    def print_dictionary(self, data: dict):
        words = data['words']
        if not words:
            print('Your personal dictionary is empty.')
            return
        for w in words:
            meaning = f" ({w['contextualMeaning']})" if w.get('contextualMeaning') else ''
            print(f"  {w['sourceWord']} = {w['targetWord']}{meaning}")
        if data.get('themes'):
            print('Themes: ' + ', '.join(f'{name} ({count})' for name, count in data['themes'].items()))

    def drill(self, session: dict):
        """Ask each word of the session and report answers to the server."""
        self.print_session_header(session)
        reverse = session['translationDirection'] == 'target_to_source'
        correct = 0
        for i, pair in enumerate(session['wordPairs'], 1):
            prompt, expected = pair['sourceWord'], pair['targetWord']
            if reverse:
                prompt, expected = expected, prompt
            answer = input(f"[{i}/{len(session['wordPairs'])}] {prompt} ==> ")
            if answer.strip().lower() == 'exit':
                break
            is_correct = normalize_answer(answer) == normalize_answer(expected)
            if is_correct:
                correct += 1
                print('  Correct!')
            else:
                print(f'  Expected: {expected}')
            if pair.get('context'):
                print(f"  e.g. {pair['context']}")
            try:
                self.client.track_word(
                    pair['sourceWord'], pair['targetWord'], session['category'],
                    session['topic'], is_correct, pair.get('context')
                )
            except requests.RequestException as e:
                print(f"Error saving progress: {e}")
        print(f"\nScore: {correct}/{len(session['wordPairs'])}")

    def start(self, category: str, args: list):
        if not args:
            print('Usage: start <topic> [count]')
            return
        count = DEFAULT_SESSION_SIZE
        if len(args) > 1 and args[-1].isdigit():
            count = int(args[-1])
            args = args[:-1]
        topic = ' '.join(args)
        print('Preparing session...')
        try:
            session = self.client.start_session(topic, category=category, total_count=count)
        except requests.HTTPError as e:
            print(f"Could not start session: {e.response.text}")
            return
        self.drill(session)

    def handle(self, command: str, args: list) -> bool:
        """Run one command. Returns False when the user wants to quit."""
        if command == 'exit':
            print('Goodbye!')
            return False
        elif command == 'help':
            print(HELP.format(topics=', '.join(TOPICS)))
        elif command == 'start':
            self.start('vocabulary', args)
        elif command == 'conj':
            self.start('conjugation', args)
        elif command == 'again':
            self.drill(self.client.get_session())
        elif command == 'focus':
            if not args:
                print('Usage: focus <instruction>')
            else:
                self.client.set_focus(' '.join(args))
                print('Focus mode on. Sessions now use your instruction.')
        elif command == 'unfocus':
            self.client.clear_focus()
            print('Focus mode off.')
        elif command == 'add':
            text = ' '.join(args)
            if '=' not in text:
                print('Usage: add <word> = <translation> [; meaning]')
                return True
            source, rest = text.split('=', 1)
            target, _, meaning = rest.partition(';')
            result = self.client.add_dictionary_word(source.strip(), target.strip(), meaning.strip())
            print('Added.' if result['success'] else result['error'])
        elif command == 'dict':
            self.print_dictionary(self.client.get_dictionary())
        elif command == 'words':
            self.print_tracked_words(self.client.get_tracked_words()['words'])
        elif command == 'direction':
            current = self.client.get_direction()['direction']
            new = 'target_to_source' if current == 'source_to_target' else 'source_to_target'
            print(f"Direction: {self.client.set_direction(new)['direction']}")
        else:
            print(f"Unknown command '{command}'. Type 'help'.")
        return True

    def run(self):
        """Run the main application loop."""
        # Check server connection
        try:
            health = self.client.health_check()
            print(f"Connected to lessico server ({health['service']})")
        except requests.RequestException:
            print(f"Error: Cannot connect to server at {self.client.base_url}")
            print("Make sure the server is running: python run_server.py")
            return

        focus = self.client.get_focus()
        if focus['active']:
            print(f"Focus mode active: {focus['session']['focusInstruction']}")
        print(HELP.format(topics=', '.join(TOPICS)))

        while True:
            user_input = input('\n> ').strip()
            if not user_input:
                continue
            command, *args = user_input.split()
            try:
                if not self.handle(command.lower(), args):
                    return
            except requests.HTTPError as e:
                print(f"Server error: {e.response.text}")
            except requests.RequestException as e:
                print(f"Error: {e}")
