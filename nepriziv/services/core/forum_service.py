import logging
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from nepriziv.infrastructure.response import not_found_response, success_response
from nepriziv.models.forum import ForumComment, ForumPost
from nepriziv.models.user import User
from nepriziv.schemas.forum import ForumCommentCreate, ForumPostCreate, ForumStatusUpdate
from nepriziv.services.core.blog_service import DEFAULT_AUTHOR, author_names
from nepriziv.utils.ids import parse_id

logger = logging.getLogger(__name__)


class ForumService:
    """
    论坛

    公开列表只含已审核的帖子，作者额外能看到自己待审核的帖子
    """

    @staticmethod
    def _get_post(db: Session, post_id) -> Optional[ForumPost]:
        pid = parse_id(post_id)
        return db.query(ForumPost).filter(ForumPost.id == pid).first() if pid else None

    @staticmethod
    def _visible(post: ForumPost, user: Optional[User]) -> bool:
        return post.status == "approved" or (user is not None and post.user_id == user.id)

    @staticmethod
    async def list_posts(db: Session, user: Optional[User] = None, topic_type: Optional[str] = None,
                         page: int = 1, limit: int = 20):
        query = db.query(ForumPost)
        if user is not None:
            query = query.filter(or_(ForumPost.status == "approved", ForumPost.user_id == user.id))
        else:
            query = query.filter(ForumPost.status == "approved")
        if topic_type:
            query = query.filter(ForumPost.topic_type == topic_type)
        query = query.order_by(ForumPost.created_at.desc(), ForumPost.id.desc())
        total = query.count()
        posts = query.offset((page - 1) * limit).limit(limit).all()
        names = author_names(db, [p.user_id for p in posts])
        items = []
        for post in posts:
            item = post.to_dict()
            item["author_name"] = names.get(post.user_id, DEFAULT_AUTHOR)
            item["comments_count"] = db.query(ForumComment).filter(ForumComment.post_id == post.id).count()
            items.append(item)
        return success_response(data={"total": total, "items": items})

    @staticmethod
    async def get_post(db: Session, post_id: str, user: Optional[User] = None):
        post = ForumService._get_post(db, post_id)
        if post is None or not ForumService._visible(post, user):
            return not_found_response("Пост")
        comments = (
            db.query(ForumComment)
            .filter(ForumComment.post_id == post.id)
            .order_by(ForumComment.created_at.asc(), ForumComment.id.asc())
            .all()
        )
        names = author_names(db, [post.user_id] + [c.user_id for c in comments])
        data = post.to_dict()
        data["author_name"] = names.get(post.user_id, DEFAULT_AUTHOR)
        data["comments"] = []
        for comment in comments:
            item = comment.to_dict()
            item["author_name"] = names.get(comment.user_id, DEFAULT_AUTHOR)
            data["comments"].append(item)
        return success_response(data=data)

    @staticmethod
    async def create_post(db: Session, user: User, data: ForumPostCreate):
        try:
            post = ForumPost(
                user_id=user.id,
                topic_type=data.topic_type,
                title=data.title,
                content=data.content,
                status="pending",
            )
            db.add(post)
            db.commit()
            db.refresh(post)
            return success_response(data=post.to_dict(), msg="Ваш пост будет опубликован после модерации")
        except Exception as e:
            db.rollback()
            raise e

    @staticmethod
    async def add_comment(db: Session, user: User, post_id: str, data: ForumCommentCreate):
        post = ForumService._get_post(db, post_id)
        if post is None or post.status != "approved":
            return not_found_response("Пост")
        try:
            comment = ForumComment(post_id=post.id, user_id=user.id, content=data.content)
            db.add(comment)
            db.commit()
            db.refresh(comment)
            return success_response(data=comment.to_dict(), msg="Комментарий добавлен")
        except Exception as e:
            db.rollback()
            raise e

    @staticmethod
    async def list_all(db: Session, status: Optional[str] = None):
        query = db.query(ForumPost)
        if status:
            query = query.filter(ForumPost.status == status)
        posts = query.order_by(ForumPost.created_at.desc(), ForumPost.id.desc()).all()
        names = author_names(db, [p.user_id for p in posts])
        items = []
        for post in posts:
            item = post.to_dict()
            item["author_name"] = names.get(post.user_id, DEFAULT_AUTHOR)
            items.append(item)
        return success_response(data=items)

    @staticmethod
    async def set_status(db: Session, post_id: str, data: ForumStatusUpdate):
        post = ForumService._get_post(db, post_id)
        if post is None:
            return not_found_response("Пост")
        try:
            post.status = data.status
            db.commit()
            db.refresh(post)
            logger.info(f"论坛帖子 {post.id} 状态 -> {data.status}")
            return success_response(data=post.to_dict())
        except Exception as e:
            db.rollback()
            raise e

    @staticmethod
    async def delete_post(db: Session, post_id: str):
        post = ForumService._get_post(db, post_id)
        if post is None:
            return not_found_response("Пост")
        try:
            db.query(ForumComment).filter(ForumComment.post_id == post.id).delete(synchronize_session=False)
            db.delete(post)
            db.commit()
            return success_response(data={"id": str(post.id)}, msg="Пост удалён")
        except Exception as e:
            db.rollback()
            raise e


forum_service = ForumService()
