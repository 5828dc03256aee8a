"""
Voting on questions and answers.

A vote moves the content counter by one and the owner's reputation by a
fixed delta. Both changes are atomic SQL increments committed together.
"""

from dataclasses import dataclass

from loguru import logger
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from models.exceptions import (
    AnswerNotFoundException,
    QuestionNotFoundException,
    SelfVoteException,
    ValidationException,
)
from repositories.answer_repository import AnswerRepository
from repositories.question_repository import QuestionRepository
from repositories.user_repository import UserRepository
from services.notification_service import NotificationService

NotificationType = db_models.NotificationType

VOTE_TYPES = ("up", "down")


@dataclass(frozen=True)
class VoteRule:
    up_reputation: int
    down_reputation: int
    up_notification: NotificationType
    down_notification: NotificationType


RULES = {
    db_models.ContentType.QUESTION: VoteRule(
        5, -2, NotificationType.QUESTION_UPVOTE, NotificationType.QUESTION_DOWNVOTE
    ),
    db_models.ContentType.ANSWER: VoteRule(
        10, -5, NotificationType.ANSWER_UPVOTE, NotificationType.ANSWER_DOWNVOTE
    ),
}


class VoteService:
    """Service for vote business logic."""

    @staticmethod
    def validate_vote_type(vote_type: str | None) -> str:
        if vote_type not in VOTE_TYPES:
            raise ValidationException('Vote type must be "up" or "down"')
        return str(vote_type)

    @staticmethod
    def vote_message(content_type: db_models.ContentType, vote_type: str) -> str:
        return f"{content_type.value.capitalize()} {vote_type}voted successfully"

    @staticmethod
    def _apply(
        db: Session,
        voter: db_models.User,
        content_type: db_models.ContentType,
        content_id: int,
        owner_id: int,
        vote_type: str,
        question_id: int,
        answer_id: int | None,
        title: str,
    ) -> None:
        rule = RULES[content_type]
        is_up = vote_type == "up"
        repo = (
            QuestionRepository(db)
            if content_type == db_models.ContentType.QUESTION
            else AnswerRepository(db)
        )
        repo.increment(content_id, votes=1 if is_up else -1)
        UserRepository(db).add_reputation(
            owner_id, rule.up_reputation if is_up else rule.down_reputation
        )
        NotificationService.notify(
            db,
            recipient_id=owner_id,
            sender=voter,
            notification_type=rule.up_notification if is_up else rule.down_notification,
            message=(
                f"{voter.username} {vote_type}voted your {content_type.value} "
                f'on "{title}"'
            ),
            question_id=question_id,
            answer_id=answer_id,
        )
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        logger.info(
            f"User {voter.id} {vote_type}voted {content_type.value} {content_id}"
        )

    @staticmethod
    def vote_question(
        db: Session, voter: db_models.User, question_id: int, vote_type: str | None
    ) -> int:
        """
        Vote on a question.

        Returns:
            The question's new vote count

        Raises:
            ValidationException: If vote_type is not up/down
            QuestionNotFoundException: If the question does not exist
            SelfVoteException: If the voter owns the question
        """
        vote_type = VoteService.validate_vote_type(vote_type)
        question_repo = QuestionRepository(db)
        question = question_repo.get_by_id(question_id)
        if not question:
            raise QuestionNotFoundException()
        if question.user_id == voter.id:
            raise SelfVoteException("question")

        VoteService._apply(
            db,
            voter,
            db_models.ContentType.QUESTION,
            question.id,
            question.user_id,
            vote_type,
            question_id=question.id,
            answer_id=None,
            title=question.title,
        )
        question_repo.refresh(question)
        return question.votes

    @staticmethod
    def vote_answer(
        db: Session, voter: db_models.User, answer_id: int, vote_type: str | None
    ) -> int:
        """
        Vote on an answer.

        Returns:
            The answer's new vote count

        Raises:
            ValidationException: If vote_type is not up/down
            AnswerNotFoundException: If the answer does not exist
            SelfVoteException: If the voter owns the answer
        """
        vote_type = VoteService.validate_vote_type(vote_type)
        answer_repo = AnswerRepository(db)
        answer = answer_repo.get_by_id(answer_id)
        if not answer:
            raise AnswerNotFoundException()
        if answer.user_id == voter.id:
            raise SelfVoteException("answer")

        VoteService._apply(
            db,
            voter,
            db_models.ContentType.ANSWER,
            answer.id,
            answer.user_id,
            vote_type,
            question_id=answer.question_id,
            answer_id=answer.id,
            title=answer.question.title,
        )
        answer_repo.refresh(answer)
        return answer.votes
