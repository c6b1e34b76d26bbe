"""Prompt builders for the text-completion endpoint.

Every prompt asks for the labeled-line layout parsed by `ContentExtractor`:
a "Question:" line, four "A)".."D)" lines and a "Correct Answer:" line.
"""

import random
from typing import Optional

ANSWER_FORMAT = """FORMAT:
Question: [The question]
A) [Option A]
B) [Option B]
C) [Option C]
D) [Option D]

Correct Answer: [Letter]) [Value]"""

SUBJECT_TOPICS = {
    "science": [
        (3, ["basic animals", "weather", "plants", "colors in nature", "day and night"],
         "Keep it simple with basic facts and observations."),
        (5, ["states of matter", "animal habitats", "food chains", "planets", "human body systems"],
         "Include some scientific terminology but keep explanations clear."),
        (7, ["chemical reactions", "ecosystems", "genetics basics", "physics forces", "cell biology"],
         "Use proper scientific terms and require deeper understanding."),
        (10, ["molecular biology", "quantum physics basics", "advanced chemistry", "complex ecosystems", "astrophysics"],
         "Advanced concepts requiring scientific reasoning and analysis."),
    ],
    "history": [
        (3, ["famous leaders", "basic dates", "countries and flags", "simple inventions"],
         "Focus on well-known facts and basic chronology."),
        (5, ["wars and battles", "ancient civilizations", "exploration", "cultural movements"],
         "Include causes, effects, and connections between events."),
        (7, ["political systems", "economic history", "social movements", "diplomatic relations"],
         "Require analysis of complex historical relationships and impacts."),
        (10, ["historiography", "comparative civilizations", "historical methodology", "complex causation"],
         "Advanced historical thinking and interpretation required."),
    ],
    "english": [
        (3, ["basic vocabulary", "simple grammar", "spelling", "sentence structure"],
         "Use common words and straightforward concepts."),
        (5, ["synonyms/antonyms", "punctuation", "parts of speech", "reading comprehension"],
         "Include moderate vocabulary and grammar rules."),
        (7, ["advanced grammar", "literary devices", "complex vocabulary", "writing techniques"],
         "Require understanding of nuanced language concepts."),
        (10, ["literary analysis", "rhetoric", "advanced composition", "linguistic patterns"],
         "Advanced language arts requiring critical thinking and analysis."),
    ],
}

SUBJECT_REQUIREMENT = {
    "science": "Educational and scientifically accurate",
    "history": "Historically accurate",
    "english": "Educationally appropriate",
}


def difficulty_label(difficulty: int) -> str:
    if difficulty <= 3:
        return "Easy"
    if difficulty <= 5:
        return "Medium"
    if difficulty <= 7:
        return "Hard"
    return "Very Hard"


def clamp_level(difficulty: float) -> int:
    """Round a 1-10 difficulty to the nearest whole level."""
    return max(1, min(10, int(difficulty + 0.5)))


def build_question_prompt(
    subject: str,
    difficulty: float,
    user_level: str,
    rng: Optional[random.Random] = None,
) -> str:
    rng = rng or random.Random()
    level = clamp_level(difficulty)

    if subject == "math":
        return build_math_prompt(level, rng)
    if subject in SUBJECT_TOPICS:
        return build_subject_prompt(subject, level, user_level, rng)
    return build_generic_prompt(subject, level, user_level, rng)


def build_math_prompt(difficulty: int, rng: random.Random) -> str:
    """Math prompt seeded with a concrete target problem for the level."""
    if difficulty <= 2:
        a, b = rng.randint(2, 8), rng.randint(2, 8)
        target = f"""Question: What is {a} × {b}?
Topic: Basic multiplication
Difficulty: Easy ({difficulty}/10)
Answer: {a * b}"""
    elif difficulty <= 4:
        a, b = rng.randint(10, 99), rng.randint(2, 10)
        if rng.random() > 0.5:
            target = f"""Question: What is {a} × {b}?
Topic: Two-digit multiplication
Difficulty: Medium-Easy ({difficulty}/10)
Answer: {a * b}"""
        else:
            target = f"""Question: What is {a * b} ÷ {a}?
Topic: Division
Difficulty: Medium-Easy ({difficulty}/10)
Answer: {b}"""
    elif difficulty <= 6:
        if rng.random() > 0.5:
            numerator, denominator = rng.randint(1, 8), rng.randint(2, 9)
            target = f"""Question: Convert the fraction {numerator}/{denominator} to a decimal (round to 2 places)
Topic: Fraction to decimal conversion
Difficulty: Medium ({difficulty}/10)
Answer: {numerator / denominator:.2f}"""
        else:
            percentage, total = rng.randint(10, 89), rng.randint(10, 99)
            target = f"""Question: What is {percentage}% of {total}?
Topic: Percentage calculation
Difficulty: Medium ({difficulty}/10)
Answer: {int(percentage * total / 100 + 0.5)}"""
    elif difficulty <= 8:
        a = rng.randint(2, 6)
        x = rng.randint(2, 12)
        target = f"""Question: Solve for x: {a}x + 1 = {a * x + 1}
Topic: Linear algebra
Difficulty: Hard ({difficulty}/10)
Answer: x = {x}"""
    else:
        topic = rng.choice(["quadratic", "trigonometry", "logarithms"])
        target = f"""Question: Advanced {topic} problem
Topic: {topic}
Difficulty: Very Hard ({difficulty}/10)
Note: Generate an appropriate {topic} question for advanced students"""

    return f"""Create a math question with these specifications:
{target}

REQUIREMENTS:
- Generate exactly this difficulty level: {difficulty}/10
- Provide exactly 4 answer choices labeled A, B, C, D
- Make one answer clearly correct
- Create 3 plausible but incorrect distractors

{ANSWER_FORMAT}

Generate this math question now:"""


def build_subject_prompt(subject: str, difficulty: int, user_level: str, rng: random.Random) -> str:
    for ceiling, topics, complexity_note in SUBJECT_TOPICS[subject]:
        if difficulty <= ceiling:
            break
    topic = rng.choice(topics)

    return f"""Create a {subject} question about {topic} for difficulty level {difficulty}/10.

DIFFICULTY REQUIREMENTS:
- Level: {difficulty}/10 ({difficulty_label(difficulty)})
- Topic: {topic}
- {complexity_note}
- Age level: {user_level}

FORMAT REQUIREMENTS:
- Exactly 4 answer choices labeled A, B, C, D
- One clearly correct answer
- {SUBJECT_REQUIREMENT[subject]}

{ANSWER_FORMAT}

Create this {subject} question now:"""


def build_generic_prompt(subject: str, difficulty: int, user_level: str, rng: random.Random) -> str:
    seed = rng.randint(0, 999)
    return f"""Create a {subject} question for difficulty level {difficulty}/10.

DIFFICULTY REQUIREMENTS:
- Exact difficulty: {difficulty}/10
- Make it appropriately challenging for this level
- User level: {user_level}
- Question ID: #{seed}

CONTENT REQUIREMENTS:
- Subject: {subject}
- Exactly 4 answer choices (A, B, C, D)
- One clearly correct answer
- Appropriate for difficulty level {difficulty}/10

{ANSWER_FORMAT}

Create question #{seed} now:"""
