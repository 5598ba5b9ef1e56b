"""
Curated follow-up question bank.

Static seed data: the pipeline reads it and never changes it. Order
matters; it breaks ties between equally scored questions.
"""

from app.features.follow_up.domain.models import Question


def _question(qid, text, themes, keywords, tone, depth) -> Question:
    return Question(
        id=qid,
        text=text,
        themes=frozenset(themes),
        keywords=tuple(keywords),
        emotional_tone=tone,
        depth=depth,
    )


QUESTION_BANK: tuple[Question, ...] = (
    # Work / stress
    _question(
        "q001",
        "What boundaries do you need to set to protect your energy?",
        ["self-care", "boundaries", "work-life-balance"],
        ["boundary", "energy", "protect", "limit", "space", "overwhelm", "drain", "tired", "exhausted"],
        "reflective",
        "medium",
    ),
    _question(
        "q002",
        "What strategies help you manage stress effectively?",
        ["stress", "coping", "self-care"],
        ["stress", "anxious", "worry", "overwhelm", "pressure", "deadline", "manage", "cope"],
        "processing",
        "medium",
    ),
    _question(
        "q003",
        "How can you communicate your needs more clearly at work?",
        ["work", "communication", "boundaries"],
        ["work", "team", "communicate", "needs", "express", "ask", "help", "support"],
        "growth",
        "medium",
    ),
    # Anxiety / nervousness
    _question(
        "q004",
        "What small step can you take to build confidence in challenging situations?",
        ["confidence", "growth", "challenge"],
        ["anxious", "nervous", "afraid", "scared", "worry", "confidence", "challenge", "difficult"],
        "growth",
        "medium",
    ),
    _question(
        "q005",
        "When do you feel most at ease, and how can you create more of those moments?",
        ["self-care", "peace", "awareness"],
        ["anxious", "calm", "peace", "ease", "relax", "breathe", "safe", "comfortable"],
        "reflective",
        "light",
    ),
    # Gratitude / family
    _question(
        "q006",
        "What relationships in your life deserve more attention?",
        ["relationships", "gratitude", "connection"],
        ["family", "friend", "love", "relationship", "connection", "time", "quality", "present"],
        "gratitude",
        "light",
    ),
    _question(
        "q007",
        "How did you show yourself compassion today?",
        ["self-compassion", "self-care"],
        ["compassion", "kind", "gentle", "care", "support", "love", "accept", "forgive"],
        "gratitude",
        "light",
    ),
    # Personal growth
    _question(
        "q008",
        "What patterns are you noticing in your emotional responses?",
        ["awareness", "patterns", "emotions"],
        ["pattern", "notice", "realize", "aware", "recognize", "emotion", "feel", "react"],
        "processing",
        "deep",
    ),
    _question(
        "q009",
        "What would living more authentically look like for you?",
        ["authenticity", "values", "growth"],
        ["authentic", "true", "honest", "real", "value", "believe", "important", "matter"],
        "reflective",
        "deep",
    ),
    # Time management
    _question(
        "q010",
        "What can you delegate or let go of to create more space?",
        ["boundaries", "time-management", "prioritization"],
        ["time", "busy", "deadline", "manage", "priority", "important", "urgent", "schedule"],
        "growth",
        "medium",
    ),
    # Practice / preparation
    _question(
        "q011",
        "How could more preparation support your peace of mind?",
        ["preparation", "anxiety", "control"],
        ["prepare", "practice", "ready", "plan", "nervous", "presentation", "speaking", "public"],
        "growth",
        "medium",
    ),
    # Disconnection / balance
    _question(
        "q012",
        "What helps you truly disconnect and be present?",
        ["mindfulness", "presence", "balance"],
        ["present", "disconnect", "mindful", "aware", "moment", "now", "focus", "attention"],
        "reflective",
        "light",
    ),
    _question(
        "q013",
        "What are you grateful for right now?",
        ["gratitude", "appreciation"],
        ["grateful", "thankful", "appreciate", "blessing", "lucky", "fortunate", "gift"],
        "gratitude",
        "light",
    ),
    # Challenge / difficulty
    _question(
        "q014",
        "What was the most challenging part of your day?",
        ["challenge", "difficulty", "processing"],
        ["difficult", "hard", "challenge", "struggle", "tough", "problem", "issue"],
        "processing",
        "light",
    ),
    _question(
        "q015",
        "How did you practice self-care today?",
        ["self-care", "wellness"],
        ["self-care", "care", "rest", "sleep", "exercise", "healthy", "wellness", "nurture"],
        "gratitude",
        "light",
    ),
)


def get_question(question_id: str) -> Question | None:
    return next((q for q in QUESTION_BANK if q.id == question_id), None)
