import datetime

from sqlalchemy import case, func

from backend.errors import ValidationError
from backend.extensions import db
from backend.models import City, Task, TaskAssignment
from backend.policy import authorize

TIMEFRAMES = ('daily', 'weekly', '15days', 'monthly')


def window_start(timeframe, today):
    if timeframe == 'daily':
        return today
    if timeframe == 'weekly':
        return today - datetime.timedelta(days=6)
    if timeframe == '15days':
        return today - datetime.timedelta(days=14)
    if timeframe == 'monthly':
        return today.replace(day=1)
    raise ValidationError(f"timeframe must be one of {', '.join(TIMEFRAMES)}")


def task_status_report(actor, timeframe, today=None):
    authorize('report.view', actor)
    today = today or datetime.date.today()
    start = datetime.datetime.combine(window_start(timeframe, today), datetime.time.min)
    end = datetime.datetime.combine(today + datetime.timedelta(days=1), datetime.time.min)

    tasks = Task.query.filter(Task.created_at >= start, Task.created_at < end).all()

    # Grouped in Python so the date bucketing is identical on every database
    buckets = {}
    for task in tasks:
        day = task.created_at.date()
        counts = buckets.setdefault(day, {"pendingCount": 0, "updatedCount": 0})
        if task.status == 'updated':
            counts["updatedCount"] += 1
        else:
            counts["pendingCount"] += 1

    return [dict(date=day.isoformat(), **buckets[day]) for day in sorted(buckets)]


def zone_performance_report(actor):
    authorize('report.view', actor)
    completed = func.coalesce(func.sum(case((Task.status == 'updated', 1), else_=0)), 0)
    rows = (
        db.session.query(
            City.name,
            City.identifier,
            func.count(TaskAssignment.task_id),
            completed,
        )
        .outerjoin(TaskAssignment, TaskAssignment.zone_ref == City.identifier)
        .outerjoin(Task, Task.id == TaskAssignment.task_id)
        .group_by(City.id, City.name, City.identifier)
        .all()
    )

    report = []
    for name, identifier, total, done in rows:
        total, done = int(total), int(done)
        report.append({
            "zoneName": name,
            "zoneRef": identifier,
            "totalTasks": total,
            "completedTasks": done,
            "completionRate": round(done / total * 100, 1) if total else 0.0,
        })
    report.sort(key=lambda r: (-r["completedTasks"], r["zoneName"]))
    return report
