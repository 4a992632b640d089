import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from nepriziv.infrastructure.response import error_response, not_found_response, success_response
from nepriziv.infrastructure.string_utils.article_parser import parse_articles
from nepriziv.infrastructure.string_utils.str_clean import truncate
from nepriziv.infrastructure.string_utils.typography import enhance_typography, text_to_markdown
from nepriziv.models.article import DiseaseArticle
from nepriziv.schemas.article import ArticleCreate, ArticleImportRequest, ArticleUpdate
from nepriziv.utils.ids import parse_id

logger = logging.getLogger(__name__)


def _number_key(article: DiseaseArticle) -> int:
    try:
        return int(article.article_number)
    except (TypeError, ValueError):
        return 0


def sort_numerically(articles: List[DiseaseArticle]) -> List[DiseaseArticle]:
    return sorted(articles, key=_number_key)


def render_markdown(body: str) -> str:
    return text_to_markdown(enhance_typography(body or ""))


class ArticleService:
    """
    Расписание болезней

    公开读取生效的条目；管理员可以批量导入正文（按条目号更新）和增删改
    """

    @staticmethod
    async def list_articles(db: Session, category: Optional[str] = None):
        query = db.query(DiseaseArticle).filter(DiseaseArticle.is_active.is_(True))
        if category:
            query = query.filter(DiseaseArticle.category == category)
        articles = sort_numerically(query.all())
        return success_response(data=[
            {key: value for key, value in a.to_dict().items() if key != "body"} for a in articles
        ])

    @staticmethod
    async def get_article(db: Session, number: str, fmt: Optional[str] = None):
        article = db.query(DiseaseArticle).filter(
            DiseaseArticle.article_number == str(number).strip(),
            DiseaseArticle.is_active.is_(True),
        ).first()
        if article is None:
            return not_found_response("Статья", feminine=True)
        data = article.to_dict()
        if fmt == "markdown":
            data["body"] = render_markdown(article.body)
            data["format"] = "markdown"
        return success_response(data=data)

    @staticmethod
    async def import_articles(db: Session, data: ArticleImportRequest):
        """
        从整段文本中切分条目正文，更新数据库中同号且生效的条目
        """
        raw_text = data.raw_text
        if not raw_text:
            return error_response(msg="rawText is required", code=400)

        parsed = parse_articles(raw_text)
        logger.info(f"解析出 {len(parsed)} 个条目")
        if not parsed:
            return error_response(
                msg="No articles found in text",
                code=400,
                data={"preview": truncate(raw_text, 500)},
            )

        updated = 0
        not_found: List[str] = []
        try:
            for item in parsed:
                rows = db.query(DiseaseArticle).filter(
                    DiseaseArticle.article_number == item.number,
                    DiseaseArticle.is_active.is_(True),
                ).all()
                if not rows:
                    not_found.append(item.number)
                    continue
                for row in rows:
                    row.body = item.body
                updated += 1
            db.commit()
        except Exception as e:
            db.rollback()
            raise e

        return success_response(data={
            "success": True,
            "totalParsed": len(parsed),
            "updated": updated,
            "notFoundInDb": not_found,
            "articleNumbers": [item.number for item in parsed],
        })

    @staticmethod
    async def list_all(db: Session):
        return success_response(data=[a.to_dict() for a in sort_numerically(db.query(DiseaseArticle).all())])

    @staticmethod
    async def create_article(db: Session, data: ArticleCreate):
        try:
            article = DiseaseArticle(**data.model_dump())
            db.add(article)
            db.commit()
            db.refresh(article)
            return success_response(data=article.to_dict(), msg="Статья создана")
        except Exception as e:
            db.rollback()
            raise e

    @staticmethod
    async def update_article(db: Session, article_id: str, data: ArticleUpdate):
        aid = parse_id(article_id)
        article = db.query(DiseaseArticle).filter(DiseaseArticle.id == aid).first() if aid else None
        if article is None:
            return not_found_response("Статья", feminine=True)
        try:
            for field, value in data.model_dump(exclude_unset=True).items():
                if value is None and field in ("title", "is_active"):
                    continue
                setattr(article, field, value)
            db.commit()
            db.refresh(article)
            return success_response(data=article.to_dict(), msg="Статья обновлена")
        except Exception as e:
            db.rollback()
            raise e

    @staticmethod
    async def deactivate_article(db: Session, article_id: str):
        aid = parse_id(article_id)
        article = db.query(DiseaseArticle).filter(DiseaseArticle.id == aid).first() if aid else None
        if article is None:
            return not_found_response("Статья", feminine=True)
        try:
            article.is_active = False
            db.commit()
            return success_response(data={"id": str(article.id)}, msg="Статья отключена")
        except Exception as e:
            db.rollback()
            raise e


article_service = ArticleService()
