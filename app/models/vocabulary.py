from sqlalchemy import Column, Integer, String
from app.core.database import Base


class FirstName(Base):
    """가입 시 무작위 이름 생성에 쓰이는 이름 목록"""
    __tablename__ = "first_names"

    first_name: str = Column(String(60), primary_key=True)


class LastName(Base):
    """가입 시 무작위 이름 생성에 쓰이는 성 목록"""
    __tablename__ = "last_names"

    last_name: str = Column(String(60), primary_key=True)


class Adjective(Base):
    """가입 시 무작위 비밀번호 생성에 쓰이는 형용사 목록"""
    __tablename__ = "adjectives"

    adjective: str = Column(String(60), primary_key=True)


class Noun(Base):
    """가입 시 무작위 비밀번호 생성에 쓰이는 명사 목록"""
    __tablename__ = "nouns"

    noun: str = Column(String(60), primary_key=True)


class Line(Base):
    """
    게시 허용 문구(Line) 모델
    - 허용 목록 제약이 켜져 있으면 게시글 메시지는 이 목록 중 하나여야 함
    """
    __tablename__ = "lines"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    line: str = Column(String(255), unique=True, nullable=False)


# (모델, 컬럼명, 기초 데이터 파일)
SEED_TABLES = (
    (FirstName, "first_name", "first_names.json"),
    (LastName, "last_name", "last_names.json"),
    (Adjective, "adjective", "adjectives.json"),
    (Noun, "noun", "nouns.json"),
    (Line, "line", "lines.json"),
)
