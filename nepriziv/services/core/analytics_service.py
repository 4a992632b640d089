import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from nepriziv.infrastructure.response import success_response
from nepriziv.infrastructure.string_utils.user_agent import parse_user_agent
from nepriziv.models.analytics import AnalyticsEvent
from nepriziv.models.user import User
from nepriziv.schemas.analytics import AnalyticsEventCreate

logger = logging.getLogger(__name__)

PAGE_VIEW = "page_view"
DAILY_WINDOW = 7


def _avg(total: int, count: int) -> int:
    # .5 向上取整
    return int(total / count + 0.5) if count else 0


def summarize_events(events: Iterable[Any]) -> Dict[str, Any]:
    """
    统计一批事件

    page_stats 只算 page_view，按访问量降序；平均时长只统计有时长的事件；
    daily_stats 取最近7个日期
    """
    events = list(events)

    pages: Dict[str, Dict[str, int]] = {}
    devices: Dict[str, int] = {}
    days: Dict[str, Dict[str, Any]] = {}
    duration_total, duration_count = 0, 0

    for event in events:
        duration = event.duration_seconds
        if event.event_type == PAGE_VIEW:
            page = pages.setdefault(event.page_url, {"visits": 0, "total": 0, "count": 0})
            page["visits"] += 1
            if duration:
                page["total"] += duration
                page["count"] += 1

        if event.device_type:
            devices[event.device_type] = devices.get(event.device_type, 0) + 1

        date = event.created_at.strftime("%Y-%m-%d") if event.created_at else "unknown"
        day = days.setdefault(date, {"sessions": set(), "page_views": 0, "total": 0, "count": 0})
        day["sessions"].add(event.session_id)
        if event.event_type == PAGE_VIEW:
            day["page_views"] += 1
        if duration:
            day["total"] += duration
            day["count"] += 1

        if duration is not None:
            duration_total += duration
            duration_count += 1

    page_stats = sorted(
        (
            {"page_url": url, "visits": s["visits"], "avg_duration": _avg(s["total"], s["count"])}
            for url, s in pages.items()
        ),
        key=lambda item: item["visits"],
        reverse=True,
    )
    daily_stats = [
        {
            "date": date,
            "sessions": len(s["sessions"]),
            "page_views": s["page_views"],
            "avg_duration": _avg(s["total"], s["count"]),
        }
        for date, s in sorted(days.items())
    ][-DAILY_WINDOW:]

    return {
        "page_stats": page_stats,
        "device_stats": [{"device_type": k, "count": v} for k, v in devices.items()],
        "daily_stats": daily_stats,
        "totals": {
            "events": len(events),
            "sessions": len({e.session_id for e in events}),
            "users": len({e.user_id for e in events if e.user_id}),
            "page_views": sum(1 for e in events if e.event_type == PAGE_VIEW),
            "avg_duration": _avg(duration_total, duration_count),
        },
    }


class AnalyticsService:

    @staticmethod
    async def record_event(
        db: Session,
        data: AnalyticsEventCreate,
        user: Optional[User] = None,
        user_agent: Optional[str] = None,
        client_ip: Optional[str] = None,
    ):
        """UA相关字段缺失时从User-Agent推断"""
        ua = data.user_agent or user_agent
        parsed = parse_user_agent(ua)
        try:
            event = AnalyticsEvent(
                session_id=data.session_id,
                user_id=user.id if user else None,
                event_type=data.event_type,
                page_url=data.page_url,
                page_title=data.page_title,
                referrer=data.referrer,
                user_agent=ua,
                device_type=data.device_type or parsed["device_type"],
                browser=data.browser or parsed["browser"],
                os=data.os or parsed["os"],
                city=data.city,
                country=data.country,
                ip=client_ip,
                duration_seconds=data.duration_seconds,
            )
            db.add(event)
            db.commit()
            db.refresh(event)
            return success_response(data={"id": str(event.id)})
        except Exception as e:
            db.rollback()
            raise e

    @staticmethod
    async def get_summary(db: Session, limit: int = 100):
        events: List[AnalyticsEvent] = (
            db.query(AnalyticsEvent)
            .order_by(AnalyticsEvent.created_at.desc(), AnalyticsEvent.id.desc())
            .limit(limit)
            .all()
        )
        summary = summarize_events(events)
        summary["events"] = [event.to_dict() for event in events]
        return success_response(data=summary)


analytics_service = AnalyticsService()
