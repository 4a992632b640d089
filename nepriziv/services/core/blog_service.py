import logging
import re
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from nepriziv.core.config import settings
from nepriziv.db.base import get_msk_datetime
from nepriziv.infrastructure.response import error_response, not_found_response, success_response
from nepriziv.infrastructure.storage.object_storage import ObjectStorageInterface, build_object_name, file_extension
from nepriziv.infrastructure.string_utils.sanitize import sanitize_html
from nepriziv.models.blog import BlogComment, BlogPost
from nepriziv.models.profile import Profile
from nepriziv.models.user import User
from nepriziv.schemas.blog import BlogCommentCreate, BlogPostCreate, BlogPostUpdate
from nepriziv.utils.ids import parse_id

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "webp", "gif")
DEFAULT_AUTHOR = "Пользователь"

_TRANSLIT = {
    "а": "a", "б": "b", "в": "v", "г": "g", "д": "d", "е": "e", "ё": "e", "ж": "zh", "з": "z",
    "и": "i", "й": "y", "к": "k", "л": "l", "м": "m", "н": "n", "о": "o", "п": "p", "р": "r",
    "с": "s", "т": "t", "у": "u", "ф": "f", "х": "h", "ц": "ts", "ч": "ch", "ш": "sh", "щ": "sch",
    "ъ": "", "ы": "y", "ь": "", "э": "e", "ю": "yu", "я": "ya",
}


def slugify(value: str) -> str:
    """
    标题 -> URL slug（俄文转写为拉丁字母）

    >>> slugify("Как получить военный билет?")
    'kak-poluchit-voennyy-bilet'
    """
    text = "".join(_TRANSLIT.get(ch, ch) for ch in (value or "").lower())
    text = re.sub(r"[^a-z0-9]+", "-", text)
    return text.strip("-")[:200]


def author_names(db: Session, user_ids: List[int]) -> Dict[int, str]:
    if not user_ids:
        return {}
    rows = db.query(Profile.id, Profile.full_name).filter(Profile.id.in_(set(user_ids))).all()
    return {row.id: row.full_name for row in rows if row.full_name}


class BlogService:
    """博客：公开读已发布文章，评论需审核，管理员维护文章"""

    @staticmethod
    def _get_post(db: Session, post_id) -> Optional[BlogPost]:
        pid = parse_id(post_id)
        return db.query(BlogPost).filter(BlogPost.id == pid).first() if pid else None

    @staticmethod
    def _slug_taken(db: Session, slug: str, exclude_id: Optional[int] = None) -> bool:
        query = db.query(BlogPost).filter(BlogPost.slug == slug)
        if exclude_id is not None:
            query = query.filter(BlogPost.id != exclude_id)
        return query.first() is not None

    @staticmethod
    async def list_published(db: Session, category: Optional[str] = None, page: int = 1, limit: int = 20):
        query = db.query(BlogPost).filter(BlogPost.status == "published")
        if category:
            query = query.filter(BlogPost.category == category)
        query = query.order_by(BlogPost.published_at.desc(), BlogPost.id.desc())
        total = query.count()
        items = [post.to_dict() for post in query.offset((page - 1) * limit).limit(limit).all()]
        return success_response(data={"total": total, "items": items})

    @staticmethod
    async def get_by_slug(db: Session, slug: str):
        post = db.query(BlogPost).filter(BlogPost.slug == slug, BlogPost.status == "published").first()
        if post is None:
            return not_found_response("Пост")
        return success_response(data=post.to_dict())

    @staticmethod
    async def list_all_posts(db: Session):
        posts = db.query(BlogPost).order_by(BlogPost.created_at.desc(), BlogPost.id.desc()).all()
        return success_response(data=[post.to_dict() for post in posts])

    @staticmethod
    async def create_post(db: Session, user: User, data: BlogPostCreate):
        slug = slugify(data.slug or data.title)
        if not slug:
            return error_response(msg="Укажите URL (slug)", code=400)
        if BlogService._slug_taken(db, slug):
            return error_response(msg="Пост с таким URL уже существует", code=400)
        try:
            post = BlogPost(
                author_id=user.id,
                title=data.title,
                slug=slug,
                excerpt=data.excerpt,
                content=sanitize_html(data.content),
                category=data.category,
                image_url=data.image_url,
                status=data.status,
                published_at=get_msk_datetime() if data.status == "published" else None,
            )
            db.add(post)
            db.commit()
            db.refresh(post)
            return success_response(data=post.to_dict(), msg="Пост создан")
        except Exception as e:
            db.rollback()
            raise e

    @staticmethod
    async def update_post(db: Session, post_id: str, data: BlogPostUpdate):
        post = BlogService._get_post(db, post_id)
        if post is None:
            return not_found_response("Пост")
        changes = data.model_dump(exclude_unset=True)
        if changes.get("slug") is not None:
            changes["slug"] = slugify(changes["slug"])
            if not changes["slug"]:
                return error_response(msg="Укажите URL (slug)", code=400)
            if BlogService._slug_taken(db, changes["slug"], exclude_id=post.id):
                return error_response(msg="Пост с таким URL уже существует", code=400)
        if changes.get("content") is not None:
            changes["content"] = sanitize_html(changes["content"])
        try:
            for field, value in changes.items():
                if value is None and field in ("title", "slug", "content", "status"):
                    continue
                setattr(post, field, value)
            # 每次发布都刷新发布时间
            if changes.get("status") == "published":
                post.published_at = get_msk_datetime()
            db.commit()
            db.refresh(post)
            return success_response(data=post.to_dict(), msg="Пост обновлён")
        except Exception as e:
            db.rollback()
            raise e

    @staticmethod
    async def delete_post(db: Session, post_id: str):
        post = BlogService._get_post(db, post_id)
        if post is None:
            return not_found_response("Пост")
        try:
            db.query(BlogComment).filter(BlogComment.post_id == post.id).delete(synchronize_session=False)
            db.delete(post)
            db.commit()
            return success_response(data={"id": str(post.id)}, msg="Пост удалён")
        except Exception as e:
            db.rollback()
            raise e

    @staticmethod
    async def upload_image(storage: ObjectStorageInterface, data: bytes, file_name: str, content_type: Optional[str]):
        """文章配图上传到公开桶，返回不带签名的URL"""
        if file_extension(file_name) not in IMAGE_EXTENSIONS:
            return error_response(msg="Допустимы только изображения", code=400)
        if not data:
            return error_response(msg="Файл пуст", code=400)
        if len(data) > settings.MAX_UPLOAD_SIZE:
            return error_response(msg="Файл слишком большой", code=400)
        bucket = settings.BLOG_IMAGES_BUCKET
        object_name = build_object_name("posts", file_name)
        if not storage.upload_bytes(data, bucket, object_name, content_type):
            return error_response(msg="Не удалось загрузить изображение", code=500)
        return success_response(data={"url": storage.get_public_url(bucket, object_name), "path": object_name})

    @staticmethod
    async def list_approved_comments(db: Session, post_id: str):
        post = BlogService._get_post(db, post_id)
        if post is None or post.status != "published":
            return not_found_response("Пост")
        comments = (
            db.query(BlogComment)
            .filter(BlogComment.post_id == post.id, BlogComment.status == "approved")
            .order_by(BlogComment.created_at.asc(), BlogComment.id.asc())
            .all()
        )
        names = author_names(db, [c.user_id for c in comments])
        items = []
        for comment in comments:
            item = comment.to_dict()
            item["author_name"] = names.get(comment.user_id, DEFAULT_AUTHOR)
            items.append(item)
        return success_response(data=items)

    @staticmethod
    async def add_comment(db: Session, user: User, post_id: str, data: BlogCommentCreate):
        post = BlogService._get_post(db, post_id)
        if post is None or post.status != "published":
            return not_found_response("Пост")
        try:
            comment = BlogComment(post_id=post.id, user_id=user.id, content=data.content, status="pending")
            db.add(comment)
            db.commit()
            db.refresh(comment)
            return success_response(data=comment.to_dict(), msg="Ваш комментарий будет опубликован после модерации")
        except Exception as e:
            db.rollback()
            raise e

    @staticmethod
    async def delete_own_comment(db: Session, user: User, comment_id: str):
        cid = parse_id(comment_id)
        comment = db.query(BlogComment).filter(
            BlogComment.id == cid, BlogComment.user_id == user.id
        ).first() if cid else None
        if comment is None:
            return not_found_response("Комментарий")
        return BlogService._delete_comment(db, comment)

    @staticmethod
    async def list_all_comments(db: Session, status: Optional[str] = None):
        query = db.query(BlogComment)
        if status:
            query = query.filter(BlogComment.status == status)
        comments = query.order_by(BlogComment.created_at.desc(), BlogComment.id.desc()).all()
        names = author_names(db, [c.user_id for c in comments])
        post_ids = {c.post_id for c in comments}
        titles = {
            p.id: p.title for p in db.query(BlogPost).filter(BlogPost.id.in_(post_ids)).all()
        } if post_ids else {}
        items = []
        for comment in comments:
            item = comment.to_dict()
            item["author_name"] = names.get(comment.user_id, "Неизвестный")
            item["post_title"] = titles.get(comment.post_id, "Удалённая статья")
            items.append(item)
        return success_response(data=items)

    @staticmethod
    async def approve_comment(db: Session, comment_id: str):
        cid = parse_id(comment_id)
        comment = db.query(BlogComment).filter(BlogComment.id == cid).first() if cid else None
        if comment is None:
            return not_found_response("Комментарий")
        try:
            comment.status = "approved"
            db.commit()
            db.refresh(comment)
            return success_response(data=comment.to_dict(), msg="Комментарий одобрен")
        except Exception as e:
            db.rollback()
            raise e

    @staticmethod
    async def delete_comment(db: Session, comment_id: str):
        cid = parse_id(comment_id)
        comment = db.query(BlogComment).filter(BlogComment.id == cid).first() if cid else None
        if comment is None:
            return not_found_response("Комментарий")
        return BlogService._delete_comment(db, comment)

    @staticmethod
    def _delete_comment(db: Session, comment: BlogComment):
        try:
            db.delete(comment)
            db.commit()
            return success_response(data={"id": str(comment.id)}, msg="Комментарий удалён")
        except Exception as e:
            db.rollback()
            raise e


blog_service = BlogService()
