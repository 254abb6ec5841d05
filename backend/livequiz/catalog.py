import json
from dataclasses import dataclass
from typing import Optional, Tuple


class CatalogError(ValueError):
    """Raised when a quiz file cannot be turned into a valid catalog."""


@dataclass(frozen=True)
class Question:
    text: str
    choices: Tuple[str, ...]
    correct_index: int
    time_limit_sec: float

    @property
    def time_limit_ms(self) -> float:
        return self.time_limit_sec * 1000

    def public_dict(self):
        # The correct index is only sent at reveal time
        return {
            'text': self.text,
            'choices': list(self.choices),
            'time_limit_sec': self.time_limit_sec,
        }


@dataclass(frozen=True)
class Catalog:
    title: str
    questions: Tuple[Question, ...]

    def __len__(self):
        return len(self.questions)

    def __getitem__(self, index) -> Question:
        return self.questions[index]


DEFAULT_CATALOG = {
    'title': 'Live Quiz',
    'questions': [
        {
            'text': '1) What is the capital of Vietnam?',
            'choices': ['Ho Chi Minh City', 'Hanoi', 'Da Nang', 'Hue'],
            'correct_index': 1,
            'time_limit_sec': 20,
        },
        {
            'text': '2) 5 x 6 = ?',
            'choices': ['11', '25', '30', '56'],
            'correct_index': 2,
            'time_limit_sec': 20,
        },
        {
            'text': '3) Which sea lies off the coast of Vietnam?',
            'choices': ['East Sea', 'Red Sea', 'Black Sea', 'Yellow Sea'],
            'correct_index': 0,
            'time_limit_sec': 20,
        },
    ],
}


def _parse_question(raw, position: int) -> Question:
    if not isinstance(raw, dict):
        raise CatalogError(f'question {position}: expected an object')
    text = str(raw.get('text') or '').strip()
    if not text:
        raise CatalogError(f'question {position}: text is required')
    choices = raw.get('choices')
    if not isinstance(choices, list) or len(choices) < 2:
        raise CatalogError(f'question {position}: at least two choices are required')
    try:
        correct_index = int(raw.get('correct_index'))
        time_limit = float(raw.get('time_limit_sec'))
    except (TypeError, ValueError):
        raise CatalogError(f'question {position}: correct_index and time_limit_sec must be numbers')
    if not 0 <= correct_index < len(choices):
        raise CatalogError(f'question {position}: correct_index {correct_index} out of range')
    if time_limit <= 0:
        raise CatalogError(f'question {position}: time_limit_sec must be positive')
    return Question(
        text=text,
        choices=tuple(str(c) for c in choices),
        correct_index=correct_index,
        time_limit_sec=time_limit,
    )


def parse_catalog(data) -> Catalog:
    if not isinstance(data, dict):
        raise CatalogError('catalog must be a JSON object')
    raw_questions = data.get('questions')
    if not isinstance(raw_questions, list) or not raw_questions:
        raise CatalogError('catalog needs at least one question')
    questions = tuple(_parse_question(q, i + 1) for i, q in enumerate(raw_questions))
    return Catalog(title=str(data.get('title') or 'Live Quiz'), questions=questions)


def load_catalog(path: Optional[str] = None) -> Catalog:
    """Load the quiz from ``path``, or the built-in demo quiz when no path is given."""
    if not path:
        return parse_catalog(DEFAULT_CATALOG)
    try:
        with open(path, encoding='utf-8') as fh:
            data = json.load(fh)
    except OSError as exc:
        raise CatalogError(f'cannot read {path}: {exc}') from exc
    except json.JSONDecodeError as exc:
        raise CatalogError(f'{path} is not valid JSON: {exc}') from exc
    return parse_catalog(data)
