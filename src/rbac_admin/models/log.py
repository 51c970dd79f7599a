import rbac_admin.schema.postgres as schema

from ._base import Base, isoformat


class ActivityLog(Base):
    __table__ = schema.audit.activity_log

    def to_dict(self):
        return {
            "id": self.id,
            "log_name": self.log_name,
            "description": self.description,
            "event": self.event,
            "causer_id": self.causer_id,
            "properties": self.properties,
            "created_at": isoformat(self.created_at),
        }
