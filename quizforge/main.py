"""Main CLI entry point for the adaptive quiz engine."""

import uuid

import click

from .config import DEFAULT_USER_LEVEL, RECOMMENDATION_LIMIT, TOPIC_CATALOG_PATH, validate_config
from .database import QuestionNotFoundError, QuizStore, init_db

LETTERS = "ABCD"


@click.group()
def cli():
    """Adaptive quiz engine CLI."""
    pass


@cli.command()
def init():
    """Initialize the database and seed the topic catalog."""
    from .content.catalog import seed_catalog

    click.echo("Initializing quiz engine...")

    issues = validate_config(require_api_key=False)
    if issues:
        for issue in issues:
            click.echo(f"  Warning: {issue}", err=True)

    init_db()
    topics = seed_catalog(QuizStore(), TOPIC_CATALOG_PATH)
    click.echo(f"Database initialized with {len(topics)} catalog topics.")


@cli.command()
@click.option("--subject", "-j", type=str, required=True, help="Subject (math, science, history, english, ...)")
@click.option("--difficulty", "-d", type=float, default=5.0, help="Difficulty from 1 to 10")
@click.option("--level", "user_level", type=str, default=DEFAULT_USER_LEVEL, help="Learner level for the prompt")
def generate(subject, difficulty, user_level):
    """Generate and store one question."""
    from .content.generator import ContentGenerator

    init_db()
    question = ContentGenerator(store=QuizStore()).generate_question(subject.lower(), difficulty, user_level)

    click.echo(f"\n[{question.id}] ({question.source.value}, difficulty {question.difficulty:.1f})")
    click.echo(question.text)
    for letter, option in zip(LETTERS, question.options):
        click.echo(f"  {letter}) {option}")


@cli.command()
@click.option("--user", "-u", "user_id", type=str, required=True, help="User id")
@click.option("--question", "-q", "question_id", type=str, required=True, help="Question id")
@click.option("--answer", "-a", "user_answer", type=str, required=True, help="Option letter or option text")
@click.option("--confidence", "-c", type=float, default=None, help="Stated confidence from 0 to 1")
@click.option("--time", "-t", "time_spent", type=float, default=0.0, help="Seconds spent")
@click.option("--difficulty", "-d", type=float, default=5.0, help="Current difficulty")
@click.option("--streak", type=int, default=0, help="Current consecutive-correct streak")
@click.option("--session", "session_id", type=str, default=None, help="Session id for the answer log")
def answer(user_id, question_id, user_answer, confidence, time_spent, difficulty, streak, session_id):
    """Score an answer and update mastery."""
    from .adaptive.scoring import AnswerScorer

    init_db()
    store = QuizStore()
    question = store.get_question(question_id)
    if question is None:
        click.echo(f"Question '{question_id}' not found.", err=True)
        return

    # A bare letter selects the option at that position
    if len(user_answer) == 1 and user_answer.upper() in LETTERS[:len(question.options)]:
        user_answer = question.options[LETTERS.index(user_answer.upper())]

    try:
        outcome = AnswerScorer(store).submit_answer(
            user_id, question_id, user_answer, confidence, time_spent,
            difficulty, streak, session_id=session_id or str(uuid.uuid4()),
        )
    except QuestionNotFoundError:
        click.echo(f"Question '{question_id}' not found.", err=True)
        return

    click.echo("Correct!" if outcome.is_correct else f"Incorrect. The answer was: {outcome.correct_answer}")
    click.echo(f"Reward: {outcome.reward:.3f} (calibration: {outcome.calibration})")
    click.echo(f"Next difficulty: {outcome.new_difficulty:.1f}")
    click.echo(
        f"Topic mastery: {outcome.mastery.mastery_level:.0%} "
        f"({outcome.mastery.correct}/{outcome.mastery.attempted}, streak {outcome.mastery.consecutive_correct})"
    )


@cli.command()
@click.option("--user", "-u", "user_id", type=str, required=True, help="User id")
@click.option("--subject", "-j", type=str, required=True, help="Subject")
@click.option("--limit", "-n", type=int, default=RECOMMENDATION_LIMIT, help="Number of topics to show")
def recommend(user_id, subject, limit):
    """Recommend the next topics to study."""
    from .adaptive.mastery import MasteryTracker
    from .content.catalog import TopicCatalog

    init_db()
    store = QuizStore()
    subject = subject.lower()
    tracker = MasteryTracker(store, TopicCatalog.from_store(store, subject))
    recommendations = tracker.recommend(user_id, subject, limit)

    if not recommendations:
        click.echo(f"No available {subject} topics to recommend.")
        return

    click.echo(f"\n=== Recommended {subject} topics ===\n")
    for rec in recommendations:
        click.echo(f"  {rec.topic.name:<30} difficulty {rec.topic.difficulty_level:.2f}  mastery {rec.mastery_level:.0%}")


@cli.command()
@click.option("--user", "-u", "user_id", type=str, required=True, help="User id")
@click.option("--subject", "-j", type=str, required=True, help="Subject")
def progress(user_id, subject):
    """Show mastery progress across a subject's topics."""
    from .adaptive.mastery import MasteryTracker
    from .content.catalog import TopicCatalog

    init_db()
    store = QuizStore()
    subject = subject.lower()
    report = MasteryTracker(store, TopicCatalog.from_store(store, subject)).subject_progress(user_id, subject)

    click.echo(f"\n=== Progress Report: {user_id} - {subject} ===\n")
    click.echo(f"Topics mastered: {report.mastered} / {report.total} ({report.progress_percent}%)")
    click.echo("\nTopic Progress:")
    for item in report.topics:
        bar_len = int(item.mastery_level * 20)
        bar = "#" * bar_len + "-" * (20 - bar_len)
        click.echo(f"  {item.topic.name:<30} [{bar}] {item.correct}/{item.attempted}")


@cli.command()
@click.option("--session", "session_id", type=str, required=True, help="Session id")
def summary(session_id):
    """Summarize a finished session."""
    from .adaptive.session import summarize_session

    init_db()
    stats = summarize_session(QuizStore().answers_for_session(session_id))
    if not stats.total_questions:
        click.echo(f"No answers recorded for session '{session_id}'.")
        return

    click.echo(f"\n=== Session {session_id} ===\n")
    click.echo(f"Questions: {stats.total_questions}")
    click.echo(f"Correct: {stats.correct_answers} ({stats.accuracy}%)")
    click.echo(f"Time: {stats.total_time:.0f}s total, {stats.average_time:.1f}s average")
    click.echo(f"Difficulty: {' -> '.join(f'{d:.1f}' for d in stats.difficulty_progression)}")
    click.echo(f"Average confidence: {stats.average_confidence:.2f}")
    click.echo(f"Calibration accuracy: {stats.calibration_accuracy:.0%}")
    click.echo(f"Overconfident: {stats.overconfidence_rate:.0%}  Underconfident: {stats.underconfidence_rate:.0%}")


if __name__ == "__main__":
    cli()
