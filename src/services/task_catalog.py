"""Fixed catalog of skill-building tasks, in display order."""

from src.domain.task import Difficulty, Task


_TASKS: tuple[Task, ...] = (
    Task(
        id="cooking-basic-meal",
        title="Cook a Basic Meal",
        description="Prepare and cook a simple, nutritious meal from scratch",
        category="Life Skills",
        difficulty=Difficulty.BEGINNER,
        estimated_time="30-45 minutes",
        icon="🍳",
    ),
    Task(
        id="public-speaking",
        title="Public Speaking",
        description="Deliver a 3-minute speech on a topic of your choice",
        category="Communication",
        difficulty=Difficulty.INTERMEDIATE,
        estimated_time="15-20 minutes",
        icon="🎤",
    ),
    Task(
        id="basic-coding",
        title="Write Basic Code",
        description="Create a simple program that solves a basic problem",
        category="Technical",
        difficulty=Difficulty.BEGINNER,
        estimated_time="45-60 minutes",
        icon="💻",
    ),
    Task(
        id="financial-budgeting",
        title="Create a Budget Plan",
        description="Design a monthly budget plan with income and expense tracking",
        category="Finance",
        difficulty=Difficulty.INTERMEDIATE,
        estimated_time="20-30 minutes",
        icon="💰",
    ),
    Task(
        id="creative-art",
        title="Create Artwork",
        description="Draw, paint, or create any form of visual art",
        category="Creative",
        difficulty=Difficulty.BEGINNER,
        estimated_time="30-60 minutes",
        icon="🎨",
    ),
    Task(
        id="fitness-routine",
        title="Complete Workout",
        description="Perform a 20-minute fitness routine or exercise session",
        category="Health",
        difficulty=Difficulty.BEGINNER,
        estimated_time="20-30 minutes",
        icon="💪",
    ),
    Task(
        id="language-learning",
        title="Language Practice",
        description="Practice speaking a foreign language for 10 minutes",
        category="Education",
        difficulty=Difficulty.INTERMEDIATE,
        estimated_time="10-15 minutes",
        icon="🗣️",
    ),
    Task(
        id="problem-solving",
        title="Solve a Puzzle",
        description="Complete a challenging puzzle or brain teaser",
        category="Mental",
        difficulty=Difficulty.INTERMEDIATE,
        estimated_time="15-30 minutes",
        icon="🧩",
    ),
    Task(
        id="music-performance",
        title="Musical Performance",
        description="Play an instrument or sing a song for 3 minutes",
        category="Creative",
        difficulty=Difficulty.INTERMEDIATE,
        estimated_time="10-15 minutes",
        icon="🎵",
    ),
    Task(
        id="leadership-task",
        title="Leadership Challenge",
        description="Organize and lead a small group activity or project",
        category="Leadership",
        difficulty=Difficulty.ADVANCED,
        estimated_time="45-60 minutes",
        icon="👥",
    ),
)


def get_available_tasks() -> list[Task]:
    """All catalog tasks in display order."""
    return list(_TASKS)


def get_task(task_id: str) -> Task | None:
    """Catalog task by slug, or None."""
    return next((task for task in _TASKS if task.id == task_id), None)


def get_first_task() -> Task:
    """The task granted automatically when a user reaches the task list."""
    return _TASKS[0]
