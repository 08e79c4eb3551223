"""
Pydantic read models for the player console.

These models are the boundary between the orchestration core and the
renderer. Upstream records are loosely typed, so every model is built through
a ``from_api`` constructor that applies the console's defaults instead of
failing on missing optional fields.
"""

from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

from player_console.utils.time_format import format_timestamp

Number = Union[int, float]

UNKNOWN_LEVEL = "Unknown Level"


def text_value(value: Any) -> str:
    """Coerce an upstream value to display text; objects resolve to their name or id."""
    if value is None or isinstance(value, bool):
        return ''
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, dict):
        return text_value(value.get('name') or value.get('id'))
    return ''


def number_value(value: Any, default: Number = 0) -> Number:
    """Coerce an upstream value to a number, falling back to `default`."""
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return float(value) if '.' in value else int(value)
        except ValueError:
            return default
    return default


def reward_value(raw: Dict[str, Any], field: str) -> Number:
    """Read `points`/`credits` preferring the flat field over `reward.<field>`."""
    flat = raw.get(field)
    if flat is not None:
        return number_value(flat)
    reward = raw.get('reward')
    if isinstance(reward, dict):
        return number_value(reward.get(field))
    return 0


def _nested(raw: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = raw.get(key)
    return value if isinstance(value, dict) else {}


class Credentials(BaseModel):
    """Account and API key used for every upstream call."""
    model_config = ConfigDict(frozen=True)

    account: str = ''
    api_key: str = ''

    @property
    def is_complete(self) -> bool:
        return bool(self.account and self.api_key)

    def masked_key(self) -> str:
        return f"{self.api_key[:5]}..." if self.api_key else ''


class NewPlayer(BaseModel):
    """Input for player creation."""
    id: str = Field(..., description="Requested player id, used as the player ref")
    name: str = Field(..., description="Display name")
    avatar: str = Field('', description="Avatar image URL")


class Player(BaseModel):
    """An entry of the player directory."""
    id: str
    name: str = ''
    player_ref: str = Field(..., description="Identifier used in player-scoped endpoints")

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> Optional['Player']:
        ref = text_value(raw.get('player')) or text_value(raw.get('id'))
        if not ref:
            return None
        return cls(
            id=text_value(raw.get('id')) or ref,
            name=text_value(raw.get('name')) or ref,
            player_ref=ref,
        )

    @classmethod
    def from_created(cls, raw: Any, requested: NewPlayer) -> 'Player':
        """Reconcile a creation response: `player_id` wins, else the requested id."""
        raw = raw if isinstance(raw, dict) else {}
        ref = text_value(raw.get('player_id')) or requested.id
        return cls(
            id=text_value(raw.get('id')) or ref,
            name=text_value(raw.get('name')) or requested.name,
            player_ref=ref,
        )


class Team(BaseModel):
    id: str
    name: str = ''

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> Optional['Team']:
        team_id = text_value(raw.get('id'))
        if not team_id:
            return None
        return cls(id=team_id, name=text_value(raw.get('name')))


class Level(BaseModel):
    name: str = UNKNOWN_LEVEL
    description: str = ''
    img_url: str = ''
    ordinal: Optional[int] = None

    @classmethod
    def from_api(cls, raw: Any) -> 'Level':
        if isinstance(raw, str) and raw:
            return cls(name=raw)
        if not isinstance(raw, dict):
            return cls()
        ordinal = raw.get('ordinal')
        return cls(
            name=text_value(raw.get('name')) or UNKNOWN_LEVEL,
            description=text_value(raw.get('description')),
            img_url=text_value(raw.get('imgUrl')),
            ordinal=ordinal if isinstance(ordinal, int) and not isinstance(ordinal, bool) else None,
        )


class PlayerProfile(BaseModel):
    """
    Display-ready profile of the selected player.

    Every optional field has a default so a sparse upstream record still
    renders.
    """
    player_ref: str
    name: str = ''
    avatar_url: str = ''
    level: Level = Field(default_factory=Level)
    team_id: str = ''
    team_name: str = ''
    points: Number = 0
    credits: Number = 0
    description: str = ''

    @classmethod
    def from_api(cls, raw: Any, player_ref: str, team_name: str = '') -> 'PlayerProfile':
        raw = raw if isinstance(raw, dict) else {}
        return cls(
            player_ref=player_ref,
            name=text_value(raw.get('name')),
            avatar_url=text_value(raw.get('avatar')) or text_value(raw.get('imgUrl')),
            level=Level.from_api(raw.get('level')),
            team_id=text_value(raw.get('team_id')),
            team_name=team_name,
            points=number_value(raw.get('points')),
            credits=number_value(raw.get('credits')),
            description=text_value(raw.get('description')),
        )

    def merge_live(self, raw: Any) -> 'PlayerProfile':
        """
        Copy of this profile with level, points and credits taken from `raw`.

        Only keys present in `raw` are refreshed; an absent one keeps its value.
        """
        raw = raw if isinstance(raw, dict) else {}
        update = {}
        if 'level' in raw:
            update['level'] = Level.from_api(raw['level'])
        for key in ('points', 'credits'):
            if key in raw:
                update[key] = number_value(raw[key])
        return self.model_copy(update=update)


class Event(BaseModel):
    id: str
    name: str = ''
    description: str = ''

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> Optional['Event']:
        event_id = text_value(raw.get('id'))
        if not event_id:
            return None
        return cls(
            id=event_id,
            name=text_value(raw.get('name')) or event_id,
            description=text_value(raw.get('description')),
        )


class Mission(BaseModel):
    id: str
    name: str = ''
    description: str = ''
    img_url: str = ''
    points: Number = 0
    credits: Number = 0
    status: str = ''
    priority: Optional[int] = None
    expires_at: Optional[str] = None

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> Optional['Mission']:
        mission_id = text_value(raw.get('id'))
        if not mission_id:
            return None
        priority = raw.get('priority')
        return cls(
            id=mission_id,
            name=text_value(raw.get('name')) or mission_id,
            description=text_value(raw.get('description')),
            img_url=text_value(raw.get('imgUrl')),
            points=reward_value(raw, 'points'),
            credits=reward_value(raw, 'credits'),
            status=text_value(raw.get('status')),
            priority=priority if isinstance(priority, int) and not isinstance(priority, bool) else None,
            expires_at=text_value(_nested(raw, 'active').get('to')) or None,
        )


class Achievement(BaseModel):
    id: str
    name: str = ''
    description: str = ''
    img_url: str = ''
    status: str = ''
    progress: Optional[Number] = None
    total: Optional[Number] = None
    points: Number = 0
    credits: Number = 0

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> Optional['Achievement']:
        achievement_id = text_value(raw.get('id'))
        if not achievement_id:
            return None
        return cls(
            id=achievement_id,
            name=text_value(raw.get('name')) or achievement_id,
            description=text_value(raw.get('description')),
            img_url=text_value(raw.get('imgUrl')),
            status=text_value(raw.get('status')),
            progress=number_value(raw.get('progress'), None),
            total=number_value(raw.get('total'), None),
            points=reward_value(raw, 'points'),
            credits=reward_value(raw, 'credits'),
        )


class Prize(BaseModel):
    id: str
    name: str = ''
    description: str = ''
    img_url: str = ''
    points: Number = 0
    credits: Number = 0
    stock_available: Optional[Number] = None
    stock_redeemed: Optional[Number] = None
    stock_count: Optional[Number] = None
    expires_at: Optional[str] = None

    @property
    def in_stock(self) -> bool:
        return self.stock_available is None or self.stock_available > 0

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> Optional['Prize']:
        prize_id = text_value(raw.get('id'))
        if not prize_id:
            return None
        stock = _nested(raw, 'stock')
        expires_at = (
            text_value(raw.get('expires_at'))
            or text_value(_nested(raw, 'active').get('to'))
            or text_value(raw.get('end_date'))
        )
        return cls(
            id=prize_id,
            name=text_value(raw.get('name')) or prize_id,
            description=text_value(raw.get('description')),
            img_url=text_value(raw.get('imgUrl')),
            points=reward_value(raw, 'points'),
            credits=reward_value(raw, 'credits'),
            stock_available=number_value(stock.get('available'), None),
            stock_redeemed=number_value(stock.get('redeemed'), None),
            stock_count=number_value(stock.get('count'), None),
            expires_at=expires_at or None,
        )


class LeaderboardEntry(BaseModel):
    player_id: str
    name: str = ''
    points: Number = 0
    rank: int
    is_current: bool = False

    @classmethod
    def from_api(cls, raw: Dict[str, Any], rank: int, current_ref: Optional[str] = None) -> Optional['LeaderboardEntry']:
        player_id = (
            text_value(raw.get('player_id'))
            or text_value(raw.get('player'))
            or text_value(raw.get('id'))
        )
        if not player_id:
            return None
        points = raw.get('points') if raw.get('points') is not None else raw.get('score')
        return cls(
            player_id=player_id,
            name=text_value(raw.get('name')) or player_id,
            points=number_value(points),
            rank=rank,
            is_current=bool(current_ref) and player_id == current_ref,
        )


class HistoryRow(BaseModel):
    """One completed interaction (mission, achievement, prize or quiz) of a player."""
    id: str
    name: str = ''
    count: int = 1
    first_at: Optional[str] = None
    last_at: Optional[str] = None
    status: str = ''

    @property
    def first_display(self) -> str:
        return format_timestamp(self.first_at)

    @property
    def last_display(self) -> str:
        return format_timestamp(self.last_at)

    @classmethod
    def from_record(
        cls,
        raw: Dict[str, Any],
        default_status: str = '',
        fallback_date_field: Optional[str] = None,
        actions: Optional[Dict[str, Any]] = None,
    ) -> Optional['HistoryRow']:
        """
        Map an upstream action record to a row.

        "first" is firstCompletedOn falling back to completedOn; "last" is
        completedOn falling back to firstCompletedOn. When the record has no
        action dates, `fallback_date_field` on the record itself is used for both.
        """
        row_id = text_value(raw.get('id'))
        if not row_id:
            return None
        if actions is None:
            actions = _nested(raw, 'actions')

        completed_on = text_value(actions.get('completedOn')) or None
        first_completed_on = text_value(actions.get('firstCompletedOn')) or None
        first_at = first_completed_on or completed_on
        last_at = completed_on or first_completed_on
        if first_at is None and fallback_date_field:
            first_at = last_at = text_value(raw.get(fallback_date_field)) or None

        count = number_value(actions.get('count'), 0)
        return cls(
            id=row_id,
            name=text_value(raw.get('name')) or row_id,
            count=int(count) if count else 1,
            first_at=first_at,
            last_at=last_at,
            status=text_value(raw.get('status')) or default_status,
        )


class StreakDefinition(BaseModel):
    id: str
    name: str = ''
    count_limit: int = 0

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> Optional['StreakDefinition']:
        streak_id = text_value(raw.get('id'))
        if not streak_id:
            return None
        limit = raw.get('countLimit', raw.get('count_limit'))
        return cls(
            id=streak_id,
            name=text_value(raw.get('name')) or streak_id,
            count_limit=int(number_value(limit)),
        )


class StreakProgress(BaseModel):
    count: int = 0
    status: str = 'inactive'

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> 'StreakProgress':
        count = raw.get('count')
        if count is None:
            count = _nested(raw, 'actions').get('count')
        return cls(
            count=int(number_value(count)),
            status=text_value(raw.get('status')) or 'inactive',
        )


class Streak(BaseModel):
    definition: StreakDefinition
    progress: StreakProgress = Field(default_factory=StreakProgress)
    synthesized: bool = False


class QuizChoice(BaseModel):
    id: str
    label: str = ''

    @classmethod
    def from_api(cls, raw: Any) -> Optional['QuizChoice']:
        if not isinstance(raw, dict):
            return None
        choice_id = text_value(raw.get('id'))
        if not choice_id:
            return None
        label = next(
            (text_value(raw.get(k)) for k in ('label', 'text', 'answer', 'name') if text_value(raw.get(k))),
            choice_id,
        )
        return cls(id=choice_id, label=label)


class QuizQuestion(BaseModel):
    id: str
    text: str = ''
    choices: List[QuizChoice] = Field(default_factory=list)

    @classmethod
    def from_api(cls, raw: Any) -> Optional['QuizQuestion']:
        if not isinstance(raw, dict):
            return None
        question_id = text_value(raw.get('id'))
        if not question_id:
            return None
        text = next(
            (text_value(raw.get(k)) for k in ('text', 'question', 'name') if text_value(raw.get(k))),
            '',
        )
        raw_choices = next(
            (raw[k] for k in ('choices', 'answers', 'options') if isinstance(raw.get(k), list)),
            [],
        )
        choices = [c for c in (QuizChoice.from_api(item) for item in raw_choices) if c is not None]
        return cls(id=question_id, text=text, choices=choices)


class Quiz(BaseModel):
    id: str
    name: str = ''
    description: str = ''
    questions: List[QuizQuestion] = Field(default_factory=list)

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> Optional['Quiz']:
        quiz_id = text_value(raw.get('id'))
        if not quiz_id:
            return None
        return cls(
            id=quiz_id,
            name=text_value(raw.get('name')) or quiz_id,
            description=text_value(raw.get('description')),
            questions=questions_from_api(raw),
        )


def questions_from_api(raw: Any) -> List[QuizQuestion]:
    """Extract questions from a quiz or start response, looking inside a nested `quiz`."""
    if not isinstance(raw, dict):
        return []
    questions = raw.get('questions')
    if not isinstance(questions, list):
        questions = _nested(raw, 'quiz').get('questions')
    if not isinstance(questions, list):
        return []
    return [q for q in (QuizQuestion.from_api(item) for item in questions) if q is not None]


class QuizOutcome(BaseModel):
    """Feedback surfaced after a quiz submission."""
    passed: Optional[bool] = None
    message: str
    kind: str = 'success'
