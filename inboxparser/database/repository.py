"""Repository layer for goal and task storage."""

import logging
from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session

from inboxparser.models.enums import GoalLevel, GoalStatus, LifeAspect
from inboxparser.models.goal import Goal
from inboxparser.models.task import Task
from inboxparser.database.models import GoalDB, TaskDB, enum_to_value

logger = logging.getLogger(__name__)


class GoalRepository:
    """Repository for Goal database operations."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, goal: Goal) -> Goal:
        """Create a new goal."""
        try:
            goal_db = GoalDB.from_pydantic(goal)
            self.db.add(goal_db)
            self.db.commit()
            self.db.refresh(goal_db)
            logger.debug(f"Created goal {goal.id}: {goal.title[:50]}")
            return goal_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create goal {goal.id}: {type(e).__name__}: {str(e)}")
            raise

    def get(self, goal_id: str) -> Optional[Goal]:
        goal_db = self.db.query(GoalDB).filter(GoalDB.id == goal_id).first()
        return goal_db.to_pydantic() if goal_db else None

    def get_active_weekly_goals(self, aspect: LifeAspect, period: Optional[str] = None) -> List[Goal]:
        """Active weekly goals of one aspect, optionally restricted to a week string."""
        query = self.db.query(GoalDB).filter(
            GoalDB.level == GoalLevel.WEEKLY.value,
            GoalDB.aspect == enum_to_value(aspect),
            GoalDB.status == GoalStatus.ACTIVE.value,
        )
        if period is not None:
            query = query.filter(GoalDB.period == period)
        return [goal_db.to_pydantic() for goal_db in query.order_by(GoalDB.created_at, GoalDB.id).all()]


class TaskRepository:
    """Repository for Task database operations."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, task: Task) -> Task:
        """Create a new task."""
        try:
            task_db = TaskDB.from_pydantic(task)
            self.db.add(task_db)
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Created task {task.id}: {task.title[:50]}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create task {task.id}: {type(e).__name__}: {str(e)}")
            raise

    def get(self, task_id: str) -> Optional[Task]:
        task_db = self.db.query(TaskDB).filter(TaskDB.id == task_id).first()
        return task_db.to_pydantic() if task_db else None

    def get_for_goal(self, goal_id: str, start: date, end: date) -> List[Task]:
        """Tasks linked to a goal whose scheduled date falls in [start, end]."""
        tasks_db = self.db.query(TaskDB).filter(
            TaskDB.weekly_goal_id == goal_id,
            TaskDB.scheduled_date >= start.isoformat(),
            TaskDB.scheduled_date <= end.isoformat(),
        ).all()
        return [task_db.to_pydantic() for task_db in tasks_db]
