import datetime

from sqlalchemy.orm import declared_attr

from backend.extensions import db

USER_ROLES = ('superadmin', 'admin', 'user')
ZONE_STATUSES = ('pending', 'uploaded')
TASK_STATUSES = ('pending', 'updated')


def _isoformat(value):
    return value.isoformat() if value else None


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    password = db.Column(db.String(255), nullable=False)
    password_is_hashed = db.Column(db.Boolean, nullable=False, default=False)
    role = db.Column(db.String(20), nullable=False, default='user') # superadmin, admin, user
    zone_ref = db.Column(db.String(20), nullable=False)
    email = db.Column(db.String(120))
    last_login_at = db.Column(db.DateTime)
    # Bootstrap account; survives renames
    is_seed = db.Column(db.Boolean, nullable=False, default=False)

    def to_dict(self):
        # Never exposes the password column
        return {
            "id": self.id,
            "username": self.username,
            "role": self.role,
            "zoneRef": self.zone_ref,
            "email": self.email,
            "lastLoginAt": _isoformat(self.last_login_at),
        }


class City(db.Model):
    """A zone. The identifier is allocated once from the name and never changes."""
    __tablename__ = 'cities'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    identifier = db.Column(db.String(20), unique=True, nullable=False)

    def to_dict(self):
        return {"id": self.id, "name": self.name, "zoneRef": self.identifier}


class _StatusRecord:
    id = db.Column(db.Integer, primary_key=True)
    status = db.Column(db.String(20), nullable=False)
    comment = db.Column(db.Text, nullable=False, default='')
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.datetime.now)

    @declared_attr
    def city_id(cls):
        return db.Column(db.Integer, db.ForeignKey('cities.id'), nullable=False, index=True)

    @declared_attr
    def updated_by(cls):
        return db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)

    @declared_attr
    def author(cls):
        return db.relationship('User')

    def to_dict(self):
        return {
            "id": self.id,
            "cityId": self.city_id,
            "status": self.status,
            "comment": self.comment,
            "updatedById": self.updated_by,
            "updatedBy": self.author.username if self.author else None,
            "updatedAt": _isoformat(self.updated_at),
        }


class StatusUpdate(_StatusRecord, db.Model):
    """Live ledger. A zone's current status is its newest row here."""
    __tablename__ = 'status_updates'


class StatusHistory(_StatusRecord, db.Model):
    """Audit copy of every status update, read by the history view."""
    __tablename__ = 'status_history'


class Task(db.Model):
    __tablename__ = 'tasks'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False, default='')
    due_date = db.Column(db.Date)
    status = db.Column(db.String(20), nullable=False, default='pending')
    created_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.datetime.now)

    creator = db.relationship('User')
    assignments = db.relationship(
        'TaskAssignment', backref='task', cascade='all, delete-orphan', lazy='selectin'
    )
    comments = db.relationship(
        'TaskComment', backref='task', cascade='all, delete-orphan',
        order_by=lambda: [TaskComment.created_at.desc(), TaskComment.id.desc()],
    )

    @property
    def assigned_zones(self):
        return sorted(a.zone_ref for a in self.assignments)

    def to_dict(self, with_comments=True):
        data = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "dueDate": _isoformat(self.due_date),
            "status": self.status,
            "createdBy": self.created_by,
            "creatorName": self.creator.username if self.creator else None,
            "createdAt": _isoformat(self.created_at),
            "assignedZones": self.assigned_zones,
        }
        if with_comments:
            data["comments"] = [c.to_dict() for c in self.comments]
        return data


class TaskAssignment(db.Model):
    __tablename__ = 'task_assignments'

    task_id = db.Column(db.Integer, db.ForeignKey('tasks.id', ondelete='CASCADE'), primary_key=True)
    zone_ref = db.Column(db.String(20), db.ForeignKey('cities.identifier'), primary_key=True)


class TaskComment(db.Model):
    __tablename__ = 'task_comments'

    id = db.Column(db.Integer, primary_key=True)
    task_id = db.Column(db.Integer, db.ForeignKey('tasks.id', ondelete='CASCADE'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    comment = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.datetime.now)

    author = db.relationship('User')

    def to_dict(self):
        return {
            "id": self.id,
            "taskId": self.task_id,
            "userId": self.user_id,
            "userName": self.author.username if self.author else None,
            "comment": self.comment,
            "createdAt": _isoformat(self.created_at),
        }


class SystemLog(db.Model):
    __tablename__ = 'system_logs'

    id = db.Column(db.Integer, primary_key=True)
    timestamp = db.Column(db.DateTime, nullable=False, default=datetime.datetime.now)
    event = db.Column(db.String(50)) # e.g. "Zone Created", "User Login"
    description = db.Column(db.String(255))
    user = db.Column(db.String(80)) # Username or 'System'

    def to_dict(self):
        return {
            "timestamp": self.timestamp.strftime('%Y-%m-%d %H:%M:%S'),
            "event": self.event,
            "description": self.description,
            "user": self.user,
        }
