import logging
from typing import Optional, Set, Tuple

from sqlalchemy import and_, func, select, true
from sqlalchemy.exc import SQLAlchemyError

from app.models.user import User
from app.models.vocabulary import Adjective, FirstName, LastName, Line, Noun
from app.repositories.base_repository import BaseRepository
from app.repositories.exceptions import RepositoryError

logger = logging.getLogger(__name__)

# 무작위 조합 후보 수 (이름/성 각각)
CANDIDATE_POOL_SIZE = 100


class VocabularyRepository(BaseRepository):
    """
    기초 단어 목록(이름, 성, 형용사, 명사, 허용 문구) 조회 Repository
    """

    async def random_unused_name_pair(self) -> Optional[Tuple[str, str]]:
        """
        아직 가입자가 없는 (이름, 성) 조합을 무작위로 하나 반환
        - 이름/성 각각 무작위 후보를 뽑아 교차 조인 후 기존 사용자와 겹치지 않는 조합 선택
        - 남은 조합이 없으면 None
        """
        first = (
            select(FirstName.first_name)
            .order_by(func.random())
            .limit(CANDIDATE_POOL_SIZE)
            .subquery("sub1")
        )
        last = (
            select(LastName.last_name)
            .order_by(func.random())
            .limit(CANDIDATE_POOL_SIZE)
            .subquery("sub2")
        )
        joined = first.join(last, true()).outerjoin(
            User,
            and_(
                User.first_name == first.c.first_name,
                User.last_name == last.c.last_name,
            ),
        )
        query = (
            select(first.c.first_name, last.c.last_name)
            .select_from(joined)
            .where(User.username.is_(None))
            .limit(1)
        )
        try:
            row = (await self.session.execute(query)).first()
            return (row.first_name, row.last_name) if row else None
        except SQLAlchemyError as e:
            logger.error(f"무작위 이름 조합 조회 실패: {e}")
            raise RepositoryError(f"무작위 이름 조합 조회 중 오류: {e}")

    async def random_password_words(self) -> Optional[Tuple[str, str]]:
        """무작위 (형용사, 명사) 조합 반환"""
        adjective = select(Adjective.adjective).order_by(func.random()).limit(1).subquery("sub1")
        noun = select(Noun.noun).order_by(func.random()).limit(1).subquery("sub2")
        query = (
            select(adjective.c.adjective, noun.c.noun)
            .select_from(adjective.join(noun, true()))
        )
        try:
            row = (await self.session.execute(query)).first()
            return (row.adjective, row.noun) if row else None
        except SQLAlchemyError as e:
            logger.error(f"무작위 단어 조합 조회 실패: {e}")
            raise RepositoryError(f"무작위 단어 조합 조회 중 오류: {e}")

    async def list_lines(self) -> Set[str]:
        """게시 허용 문구 전체 반환"""
        try:
            result = await self.session.execute(select(Line.line))
            return set(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"허용 문구 조회 실패: {e}")
            raise RepositoryError(f"허용 문구 조회 중 오류: {e}")
