"""Console UI for wordloom application."""

import json

import requests

from cli.api_client import WordloomAPIClient

MODES = ('normal', 'weakness', 'challenge')


class ConsoleUI:
    """Console user interface for wordloom application."""

    def __init__(self, client: WordloomAPIClient):
        self.client = client

    def print_dashboard(self, stats: dict):
        """Print dashboard counters."""
        print('\n' + '=' * 50)
        print('DASHBOARD')
        print('=' * 50)
        print(f'Today: {stats["today_progress"]}/{stats["daily_goal"]} answers')
        print(f'Words: {stats["total_words"]} total, {stats["learned"]} learned, '
              f'{stats["in_progress"]} in progress')
        print(f'Due now: {stats["due_now"]} (overdue {stats["overdue"]}), '
              f'next days: {stats["upcoming"]}')
        print(f'Weak words: {stats["weak_words"]} | Challenge ready: {stats["challenge_ready"]}')
        print('=' * 50 + '\n')

    def print_question(self, session: dict, question: dict):
        print('-' * 40)
        print(f'[{session["mode"]}] {session["position"]}/{session["target"]} '
              f'- Stage {question["stage"]}: {question["stage_name"]}')
        if question.get('audio_text'):
            print('(audio) Listen and choose the meaning')
        else:
            print(f'\n>>> {question["prompt"]}')
        if question.get('cloze'):
            print(f'    {question["cloze"]}')
        for n, choice in enumerate(question.get('choices') or [], start=1):
            print(f'  {n}. {choice}')

    def ask(self, question: dict):
        """Read a response for a question. Returns None to quit."""
        kind = question['kind']
        if kind == 'self_judge':
            input('Translate aloud, then press Enter to reveal...')
            print(f'    {question["sentence"]["en"]}')
            while True:
                verdict = input('OK or NG? ').strip().upper()
                if verdict == 'EXIT':
                    return None
                if verdict in ('OK', 'NG'):
                    return {'correct': verdict == 'OK'}

        if kind == 'blanks':
            answers = []
            for n in range(1, question['blank_count'] + 1):
                value = input(f'____{n} ==> ').strip()
                if value.lower() == 'exit':
                    return None
                answers.append(value)
            return {'answers': answers}

        while True:
            value = input('==> ').strip()
            if value.lower() == 'exit':
                return None
            if not value:
                continue
            if kind == 'choice':
                choices = question['choices']
                if value.isdigit() and 1 <= int(value) <= len(choices):
                    return {'answer': choices[int(value) - 1]}
                print(f'Pick a number between 1 and {len(choices)}')
                continue
            return {'answer': value}

    def run_session(self, mode: str, limit: int = None):
        session = self.client.start_session(mode, limit)
        if session['target'] == 0:
            print(session['message'])
            return

        session_id = session['session_id']
        while True:
            data = self.client.get_question(session_id)
            question = data['question']
            if question is None:
                s = data['session']
                print(f'\nSession complete: {s["correct"]}/{s["answered"]} correct\n')
                return

            if not question['available']:
                print(f'\nStage {question["stage"]} is not set up for this word: {question["reason"]}')
                print('Edit the word to add cloze blanks or sentences. Skipping.')
                self.client.skip(session_id)
                continue

            self.print_question(data['session'], question)
            response = self.ask(question)
            if response is None:
                print('Session stopped.')
                return

            result = self.client.submit_answer(session_id, **response)
            if result['correct']:
                print('Correct!')
            else:
                print(f'Incorrect. Answer: {" / ".join(result["expected"])}')
            if mode == 'challenge':
                print('(challenge answers do not change your schedule)')

    def run_writing(self, arg: str = ''):
        """Show today's writing target; 'reshuffle' draws again, any other text is saved as the draft."""
        if arg == 'reshuffle':
            writing = self.client.reshuffle_writing()
        elif arg:
            writing = self.client.save_draft(arg)
        else:
            writing = self.client.get_writing()

        target = writing['target']
        if target is None:
            print('No words to write about yet.')
            return
        print(f'\nToday\'s writing target: {target["word"]} ({target["meaning"]})')
        if writing['draft']:
            print(f'Draft: {writing["draft"]}')
            print('\nPaste this into your assistant for corrections:\n')
            print(writing['prompt'])
            self.client.mark_writing_done()
        else:
            print('Write one sentence about your day with it: writing <sentence>')

    def run_qa(self, arg: str):
        """Build an assistant prompt for a question about one of your words: qa <word> <question>."""
        word, _, question = arg.partition(' ')
        match = next((w for w in self.client.list_words() if w['word'] == word), None)
        if match is None:
            print(f'No word "{word}"')
            return
        print(self.client.qa_prompt(match['id'], question)['prompt'])

    def run(self, mode: str = None, limit: int = None):
        """Run the main application loop."""
        try:
            health = self.client.health_check()
            print(f"Connected to wordloom server ({health['service']})")
        except requests.RequestException:
            print(f"Error: Cannot connect to server at {self.client.base_url}")
            print("Make sure the server is running: python run_server.py")
            return

        if mode:
            self.run_session(mode, limit)
            return

        print('Commands: normal, weakness, challenge, dashboard, writing [reshuffle|<draft>], qa <word> <question>, '
              'export <file>, import <file>, exit')
        while True:
            self.print_dashboard(self.client.get_dashboard())
            command = input('wordloom> ').strip()
            name, _, arg = command.partition(' ')
            try:
                if name == 'exit':
                    print('Goodbye!')
                    return
                elif name in MODES:
                    self.run_session(name, int(arg) if arg.isdigit() else None)
                elif name == 'qa' and arg:
                    self.run_qa(arg.strip())
                elif name == 'writing':
                    self.run_writing(arg.strip())
                elif name == 'export' and arg:
                    with open(arg, 'w', encoding='utf-8') as f:
                        json.dump(self.client.export_words(), f, indent=2, ensure_ascii=False)
                    print(f'Exported to {arg}')
                elif name == 'import' and arg:
                    with open(arg, 'r', encoding='utf-8') as f:
                        result = self.client.import_words(json.load(f))
                    print(f'Imported {result["count"]} words')
                elif name != 'dashboard':
                    print('Unknown command')
            except (requests.RequestException, OSError, json.JSONDecodeError) as e:
                print(f'Error: {e}')
