from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    Table,
    Text,
    Time,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


APPOINTMENT_STATUSES = ("scheduled", "completed", "cancelled", "no-show")


t_center_services = Table(
    'center_services', metadata,
    Column('center_id', ForeignKey('verification_centers.id', ondelete='CASCADE'), primary_key=True),
    Column('service_id', ForeignKey('services.id', ondelete='CASCADE'), primary_key=True),
)


t_counter_services = Table(
    'counter_services', metadata,
    Column('counter_id', ForeignKey('counters.id', ondelete='CASCADE'), primary_key=True),
    Column('service_id', ForeignKey('services.id', ondelete='CASCADE'), primary_key=True),
)


class Users(Base):
    __tablename__ = 'users'

    first_name = Column(Text, nullable=False)
    email = Column(Text, nullable=False, unique=True)
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)
    last_name = Column(Text)
    phone_no = Column(Text)
    gender = Column(Enum('male', 'female', 'other', name='user_gender'))
    date_of_birth = Column(Date)
    nationality = Column(Text)
    passport_no = Column(Text)
    passport_expiry = Column(Date)
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    appointments = relationship('Appointments', back_populates='user')


class Services(Base):
    __tablename__ = 'services'

    category = Column(Text, nullable=False)
    title = Column(Text, nullable=False)
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)
    description = Column(Text)
    fees = Column(Text, nullable=False, server_default=text("'{}'"))
    required_documents = Column(Text, nullable=False, server_default=text("'[]'"))
    processing_time = Column(Text)
    display_order = Column(Integer, nullable=False, server_default=text('0'))

    appointments = relationship('Appointments', back_populates='service')


class VerificationCenters(Base):
    __tablename__ = 'verification_centers'

    name = Column(Text, nullable=False)
    city = Column(Text, nullable=False)
    country = Column(Text, nullable=False)
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    operating_hours = Column(Text, nullable=False, server_default=text("'{}'"))
    id = Column(Integer, primary_key=True)
    address = Column(Text)
    state = Column(Text)
    postal_code = Column(Text)
    phone = Column(Text)
    email = Column(Text)
    latitude = Column(Float)
    longitude = Column(Float)
    display_order = Column(Integer, nullable=False, server_default=text('0'))
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    counters = relationship('Counters', back_populates='center')
    services = relationship('Services', secondary=t_center_services)


class Counters(Base):
    __tablename__ = 'counters'
    __table_args__ = (
        UniqueConstraint('center_id', 'counter_name'),
    )

    id = Column(Integer, primary_key=True)
    center_id = Column(ForeignKey('verification_centers.id', ondelete='CASCADE'), nullable=False)
    counter_name = Column(Text, nullable=False)
    is_active = Column(Integer, nullable=False, server_default=text('1'))

    center = relationship('VerificationCenters', back_populates='counters')
    services = relationship('Services', secondary=t_counter_services)
    appointments = relationship('Appointments', back_populates='counter')


class TimeSlots(Base):
    __tablename__ = 'time_slots'

    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    appointments = relationship('Appointments', back_populates='slot')


class Appointments(Base):
    __tablename__ = 'appointments'
    __table_args__ = (
        Index('ix_appointments_capacity', 'at_counter', 'appointment_date', 'slot_id', 'appointment_status'),
    )

    booked_by = Column(ForeignKey('users.id', ondelete='RESTRICT'), nullable=False)
    booked_for_service = Column(ForeignKey('services.id', ondelete='RESTRICT'), nullable=False)
    at_counter = Column(ForeignKey('counters.id', ondelete='RESTRICT'), nullable=False)
    appointment_date = Column(Date, nullable=False)
    slot_id = Column(ForeignKey('time_slots.id', ondelete='RESTRICT'), nullable=False)
    appointment_status = Column(
        Enum(*APPOINTMENT_STATUSES, name='appointment_status'),
        nullable=False,
        server_default=text("'scheduled'"),
    )
    id = Column(Integer, primary_key=True)
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    user = relationship('Users', back_populates='appointments')
    service = relationship('Services', back_populates='appointments')
    counter = relationship('Counters', back_populates='appointments')
    slot = relationship('TimeSlots', back_populates='appointments')
    booking = relationship('Bookings', uselist=False, back_populates='appointment')


class Bookings(Base):
    __tablename__ = 'bookings'

    booked_date = Column(Date, nullable=False)
    booked_slot = Column(ForeignKey('time_slots.id', ondelete='RESTRICT'), nullable=False)
    appointment_id = Column(ForeignKey('appointments.id', ondelete='RESTRICT'), nullable=False, unique=True)
    id = Column(Integer, primary_key=True)
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    appointment = relationship('Appointments', back_populates='booking')
    slot = relationship('TimeSlots')


class SystemConfig(Base):
    __tablename__ = 'system_config'

    config_key = Column(Text, nullable=False, unique=True)
    config_value = Column(Text, nullable=False, server_default=text("'{}'"))
    is_public = Column(Integer, nullable=False, server_default=text('0'))
    id = Column(Integer, primary_key=True)
    updated_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))


class AdminLogs(Base):
    __tablename__ = 'admin_logs'

    actor_id = Column(Integer, nullable=False)
    actor_type = Column(Text, nullable=False, server_default=text("'admin'"))
    action = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    details = Column(Text)
    resource_type = Column(Text)
    resource_id = Column(Text)
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))
