from sqlalchemy import create_engine, Column, String, Text, DateTime, func
from sqlalchemy.orm import sessionmaker, scoped_session, declarative_base
from assistable.node.auth.credential_encryption import encrypt_credential_data
from assistable.node.cache import node_cache
from assistable.node.config import Config
from typing import List, Dict, Any, Optional
import datetime
import logging
import json
import uuid


LOGGER = logging.getLogger(__name__)


Base = declarative_base()
class AssistantRecord(Base):
    __tablename__ = "assistant"
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    details = Column(Text, nullable=False)  # JSON: remote assistant id, name, instructions, ...
    credential = Column(String, nullable=True)  # id into the credential table
    icon_src = Column(String, nullable=True)
    created_date = Column(DateTime, default=datetime.datetime.now)
    updated_date = Column(DateTime, default=datetime.datetime.now, onupdate=datetime.datetime.now)

    def get_details(self) -> Dict[str, Any]:
        return json.loads(self.details) if self.details else {}

class ChatMessageRecord(Base):
    __tablename__ = "chat_message"
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    role = Column(String, nullable=False)  # userMessage | apiMessage
    chatflow_id = Column(String, nullable=True)
    content = Column(Text, nullable=False)
    chat_id = Column(String, nullable=False, index=True)
    session_id = Column(String, nullable=True)  # remote thread id
    created_date = Column(DateTime, default=func.now())

class CredentialRecord(Base):
    __tablename__ = "credential"
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    credential_name = Column(String, nullable=False)  # e.g. openAIApi
    encrypted_data = Column(Text, nullable=False)
    created_date = Column(DateTime, default=datetime.datetime.now)
    updated_date = Column(DateTime, default=datetime.datetime.now, onupdate=datetime.datetime.now)


class Metadata:

    def __init__(self, metadata_db_url):
        self.metadata_db_url = metadata_db_url
        self.engine = create_engine(self.metadata_db_url, echo=False)
        self.create_all()
        self.session = scoped_session(sessionmaker(bind=self.engine, expire_on_commit=False))
        LOGGER.info(f"Created Metadata instance using database engine: {self.metadata_db_url}")

    @classmethod
    @node_cache
    def metadata(cls) -> "Metadata":
        return Metadata(Config.config().get_metadata_db_url())

    def create_all(self):
        return Base.metadata.create_all(self.engine)

    def get_db_session(self) -> scoped_session:
        if not self.engine:
            self.engine = create_engine(self.metadata_db_url, echo=False)
            self.create_all()
            self.session = scoped_session(sessionmaker(bind=self.engine, expire_on_commit=False))
            LOGGER.info(f"Re-created Metadata instance using database engine: {self.metadata_db_url}")
        return self.session()

    def close_db_engine(self):
        if self.engine:
            self.session.remove()
            self.engine.dispose()
            self.engine = None
            LOGGER.info(f"Closed database engine")

    def close(self) -> None:
        self.close_db_engine()

    # --- assistants ---

    def get_assistant(self, assistant_id: str) -> Optional[AssistantRecord]:
        if not assistant_id:
            return None
        with self.get_db_session() as session:
            assistant = session.query(AssistantRecord).filter_by(id=assistant_id).first()
            if assistant:
                session.expunge(assistant)
            return assistant

    def list_assistants(self) -> List[AssistantRecord]:
        with self.get_db_session() as session:
            assistants = session.query(AssistantRecord).order_by(AssistantRecord.created_date).all()
            for assistant in assistants:
                session.expunge(assistant)
            return assistants

    def create_assistant(self, details: Dict[str, Any], credential: Optional[str] = None,
                         icon_src: Optional[str] = None) -> AssistantRecord:
        session = self.get_db_session()
        try:
            record = AssistantRecord(details=json.dumps(details), credential=credential, icon_src=icon_src)
            session.add(record)
            session.commit()
            session.refresh(record)
            session.expunge(record)
            LOGGER.info(f"Created assistant record {record.id} for remote assistant {details.get('id')}")
            return record
        except Exception as e:
            LOGGER.error(f"Error creating assistant record: {e}", exc_info=True)
            session.rollback()
            raise e
        finally:
            session.close()

    # --- chat messages ---

    def get_chat_message_by_chat_id(self, chat_id: str) -> Optional[ChatMessageRecord]:
        if not chat_id:
            return None
        with self.get_db_session() as session:
            chat_message = (session.query(ChatMessageRecord)
                            .filter_by(chat_id=chat_id)
                            .order_by(ChatMessageRecord.created_date)
                            .first())
            if chat_message:
                session.expunge(chat_message)
            return chat_message

    def add_chat_message(self, chat_id: str, role: str, content: str, session_id: Optional[str] = None,
                         chatflow_id: Optional[str] = None) -> ChatMessageRecord:
        session = self.get_db_session()
        try:
            record = ChatMessageRecord(chat_id=chat_id, role=role, content=content,
                                       session_id=session_id, chatflow_id=chatflow_id)
            session.add(record)
            session.commit()
            session.refresh(record)
            session.expunge(record)
            LOGGER.debug(f"Saved {role} chat message for chat_id={chat_id} session_id={session_id}")
            return record
        except Exception as e:
            LOGGER.error(f"Error saving chat message for chat_id={chat_id}: {e}", exc_info=True)
            session.rollback()
            raise e
        finally:
            session.close()

    def delete_chat_messages_by_session(self, session_id: str) -> int:
        if not session_id:
            return 0
        session = self.get_db_session()
        try:
            deleted = session.query(ChatMessageRecord).filter_by(session_id=session_id).delete()
            session.commit()
            LOGGER.info(f"Deleted {deleted} chat messages for session_id={session_id}")
            return deleted
        except Exception as e:
            LOGGER.error(f"Error deleting chat messages for session_id={session_id}: {e}", exc_info=True)
            session.rollback()
            raise e
        finally:
            session.close()

    # --- credentials ---

    def get_credential(self, credential_id: str) -> Optional[CredentialRecord]:
        if not credential_id:
            return None
        with self.get_db_session() as session:
            credential = session.query(CredentialRecord).filter_by(id=credential_id).first()
            if credential:
                session.expunge(credential)
            return credential

    def create_credential(self, name: str, credential_name: str, data: Dict[str, Any]) -> CredentialRecord:
        session = self.get_db_session()
        try:
            record = CredentialRecord(name=name, credential_name=credential_name,
                                      encrypted_data=encrypt_credential_data(data))
            session.add(record)
            session.commit()
            session.refresh(record)
            session.expunge(record)
            LOGGER.info(f"Created credential {record.id} ({credential_name})")
            return record
        except Exception as e:
            LOGGER.error(f"Error creating credential {name}: {e}", exc_info=True)
            session.rollback()
            raise e
        finally:
            session.close()
