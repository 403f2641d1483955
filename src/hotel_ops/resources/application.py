"""
Прикладной слой контекста ресурсов.

Реестр ресурсов координирует номера, парковку, объекты инфраструктуры
и заявки на ремонт. Все изменения выполняются внутри Unit of Work:
изменяемые сущности регистрируются через track(), изменения коллекций
через record_undo(), события публикуются только после фиксации.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ..shared_kernel import EntityId, ILogger, StandardLogger, StateConflictError
from . import interfaces as ports
from .domain import (
    AlreadyWaitlisted,
    Facility,
    FacilityReleased,
    MaintenanceCategory,
    MaintenancePriority,
    MaintenanceReported,
    MaintenanceRequest,
    MaintenanceStatus,
    MaintenanceStatusChanged,
    ParkingAllocation,
    ParkingAlreadyAssigned,
    ParkingAssigned,
    ParkingReleased,
    ParkingSlot,
    ParkingWaitlisted,
    Room,
    RoomReleased,
    WaitlistEntry,
)

# DTO для входящих данных


class ReportMaintenanceRequest(BaseModel):
    """Запрос на регистрацию неисправности в номере."""

    room_no: int
    category: MaintenanceCategory
    description: str = ""
    priority: MaintenancePriority = MaintenancePriority.MEDIUM

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str) -> str:
        return v.strip()


class ParkingRequest(BaseModel):
    """Запрос на парковочное место."""

    guest_id: EntityId = Field(..., min_length=1)
    vehicle: str = Field(..., min_length=1)

    @field_validator("vehicle")
    @classmethod
    def normalize_vehicle(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Не указан автомобиль")
        return v


# Сервисы приложения


class ResourceRegistry:
    """Реестр ресурсов: номера, парковка, объекты инфраструктуры и ремонт."""

    def __init__(self, uow: ports.IResourceUnitOfWork, logger: Optional[ILogger] = None):
        self._uow = uow
        self._logger = logger or StandardLogger(__name__)

    # Номера

    def allocate_room(self, room_no: int) -> Room:
        """Занимает свободный номер; номер в другом статусе вызывает RoomNotAvailable."""
        try:
            with self._uow:
                room = self._uow.rooms.get(room_no)
                self._uow.track(room)
                room.allocate()
        except Exception as e:
            self._logger.error("Room allocation failed", room_no=room_no, error=str(e))
            raise
        self._logger.info("Room allocated", room_no=room_no)
        return room

    def release_room(self, room_no: int) -> Room:
        """Освобождает номер."""
        try:
            with self._uow:
                room = self._uow.rooms.get(room_no)
                self._release_room(room)
        except Exception as e:
            self._logger.error("Room release failed", room_no=room_no, error=str(e))
            raise
        self._logger.info("Room released", room_no=room_no)
        return room

    def _release_room(self, room: Room) -> None:
        self._uow.track(room)
        room.release()
        self._uow.collect_event(RoomReleased(room_no=room.number))

    def get_room(self, room_no: int) -> Room:
        return self._uow.rooms.get(room_no)

    def list_rooms(self) -> List[Room]:
        return list(self._uow.rooms)

    def list_available_rooms(self) -> List[Room]:
        return self._uow.rooms.list_available()

    # Заявки на ремонт

    def report_maintenance(self, request: ReportMaintenanceRequest) -> MaintenanceRequest:
        """
        Регистрирует неисправность и выводит номер на ремонт.

        Статус номера меняется безусловно, даже если номер забронирован.
        """
        try:
            with self._uow:
                room = self._uow.rooms.get(request.room_no)
                maintenance = MaintenanceRequest(
                    id=self._uow.maintenance.next_id(),
                    room_no=room.number,
                    category=request.category,
                    description=request.description,
                    priority=request.priority,
                    report_date=self._uow.today(),
                )
                self._uow.maintenance.add(maintenance)
                self._uow.record_undo(
                    lambda: self._uow.maintenance.discard(maintenance.id)
                )
                self._uow.track(room)
                room.mark_as_maintenance()
                self._uow.collect_event(
                    MaintenanceReported(
                        request_id=maintenance.id,
                        room_no=room.number,
                        issue=maintenance.issue,
                        priority=maintenance.priority,
                    )
                )
        except Exception as e:
            self._logger.error(
                "Maintenance report failed", room_no=request.room_no, error=str(e)
            )
            raise
        self._logger.info(
            "Maintenance reported",
            request_id=maintenance.id,
            room_no=maintenance.room_no,
            priority=maintenance.priority.value,
        )
        return maintenance

    def update_maintenance_status(
        self, request_id: int, status: MaintenanceStatus
    ) -> MaintenanceRequest:
        """Продвигает заявку на ремонт; при закрытии номер снова становится свободным."""
        try:
            with self._uow:
                maintenance = self._uow.maintenance.get(request_id)
                self._uow.track(maintenance)
                maintenance.change_status(status)
                if status == MaintenanceStatus.RESOLVED:
                    self._release_room(self._uow.rooms.get(maintenance.room_no))
                self._uow.collect_event(
                    MaintenanceStatusChanged(
                        request_id=maintenance.id,
                        room_no=maintenance.room_no,
                        status=maintenance.status,
                    )
                )
        except Exception as e:
            self._logger.error(
                "Maintenance status update failed",
                request_id=request_id,
                status=getattr(status, "value", status),
                error=str(e),
            )
            raise
        self._logger.info(
            "Maintenance status updated",
            request_id=request_id,
            status=maintenance.status.value,
        )
        return maintenance

    def list_maintenance(self, open_only: bool = False) -> List[MaintenanceRequest]:
        if open_only:
            return self._uow.maintenance.list_open()
        return list(self._uow.maintenance)

    # Парковка

    def allocate_parking(self, request: ParkingRequest) -> ParkingAllocation:
        """
        Назначает гостю первое свободное место по возрастанию номера.

        Если свободных мест нет, запрос ставится в конец очереди ожидания.
        У гостя может быть не больше одного места и одной записи в очереди.
        """
        try:
            with self._uow:
                guest = self._uow.guests.get(request.guest_id)
                current = self._uow.parking.find_by_guest(guest.id)
                if current is not None:
                    raise ParkingAlreadyAssigned(guest.id, current.number)
                position = self._uow.waitlist.position_of(guest.id)
                if position is not None:
                    raise AlreadyWaitlisted(guest.id, position)

                slot = self._uow.parking.first_available()
                if slot is None:
                    allocation = self._enqueue(guest.id, request.vehicle)
                else:
                    allocation = self._assign(slot, guest.id, request.vehicle)
        except Exception as e:
            self._logger.error(
                "Parking allocation failed", guest_id=request.guest_id, error=str(e)
            )
            raise
        if allocation.waitlisted:
            self._logger.info(
                "Parking request waitlisted",
                guest_id=allocation.guest_id,
                position=allocation.waitlist_position,
            )
        else:
            self._logger.info(
                "Parking assigned",
                guest_id=allocation.guest_id,
                slot_no=allocation.slot_no,
            )
        return allocation

    def release_parking(self, slot_no: int) -> ParkingSlot:
        """Освобождает занятое место. Очередь ожидания не разбирается автоматически."""
        try:
            with self._uow:
                slot = self._uow.parking.get(slot_no)
                guest_id = slot.guest_id
                self._uow.track(slot)
                slot.release()

                # Бронирования гостя больше не ссылаются на освобожденное место
                for booking in self._uow.bookings.list_by_guest(guest_id):
                    if booking.parking_slot == slot_no:
                        self._uow.track(booking)
                        booking.parking_slot = None

                self._uow.collect_event(ParkingReleased(slot_no=slot_no, guest_id=guest_id))
        except Exception as e:
            self._logger.error("Parking release failed", slot_no=slot_no, error=str(e))
            raise
        self._logger.info("Parking released", slot_no=slot_no, guest_id=guest_id)
        return slot

    def drain_waitlist(self) -> List[ParkingAllocation]:
        """
        Разбирает очередь ожидания: голова очереди получает свободное место
        с наименьшим номером, пока не закончатся места или ожидающие.
        """
        allocations: List[ParkingAllocation] = []
        try:
            with self._uow:
                waitlist = self._uow.waitlist
                while waitlist:
                    slot = self._uow.parking.first_available()
                    if slot is None:
                        break
                    entry = waitlist.pop_next()
                    self._uow.record_undo(
                        lambda entry=entry: waitlist.requeue_front(entry)
                    )
                    allocations.append(
                        self._assign(slot, entry.guest_id, entry.vehicle, from_waitlist=True)
                    )
        except Exception as e:
            self._logger.error("Waitlist draining failed", error=str(e))
            raise
        self._logger.info(
            "Waitlist drained",
            assigned=len(allocations),
            remaining=len(self._uow.waitlist),
        )
        return allocations

    def _enqueue(self, guest_id: EntityId, vehicle: str) -> ParkingAllocation:
        waitlist = self._uow.waitlist
        entry = waitlist.enqueue(guest_id, vehicle)
        self._uow.record_undo(lambda: waitlist.discard_last(entry))
        position = len(waitlist)
        self._uow.collect_event(
            ParkingWaitlisted(guest_id=guest_id, vehicle=vehicle, position=position)
        )
        return ParkingAllocation(
            guest_id=guest_id, vehicle=vehicle, waitlist_position=position
        )

    def _assign(
        self,
        slot: ParkingSlot,
        guest_id: EntityId,
        vehicle: str,
        from_waitlist: bool = False,
    ) -> ParkingAllocation:
        self._uow.track(slot)
        slot.assign(guest_id, vehicle)

        # Место записывается в ближайшее незавершенное бронирование гостя
        booking = self._uow.bookings.find_open_for_guest(guest_id)
        if booking is not None:
            self._uow.track(booking)
            booking.parking_slot = slot.number

        self._uow.collect_event(
            ParkingAssigned(
                guest_id=guest_id,
                slot_no=slot.number,
                vehicle=vehicle,
                from_waitlist=from_waitlist,
            )
        )
        return ParkingAllocation(guest_id=guest_id, vehicle=vehicle, slot_no=slot.number)

    def list_parking(self) -> List[ParkingSlot]:
        return list(self._uow.parking)

    def waitlist(self) -> List[WaitlistEntry]:
        return list(self._uow.waitlist)

    # Объекты инфраструктуры

    def allocate_facility(self, facility_id: int) -> Facility:
        """Бронирует объект. Автоматического освобождения нет."""
        try:
            with self._uow:
                facility = self._uow.facilities.get(facility_id)
                self._uow.track(facility)
                facility.allocate()
        except Exception as e:
            self._logger.error(
                "Facility allocation failed", facility_id=facility_id, error=str(e)
            )
            raise
        self._logger.info("Facility allocated", facility_id=facility_id)
        return facility

    def release_facility(self, facility_id: int) -> Facility:
        """Освобождает объект по распоряжению персонала."""
        try:
            with self._uow:
                facility = self._uow.facilities.get(facility_id)
                if facility.is_available():
                    raise StateConflictError(f"Объект {facility.name} не забронирован")
                self._uow.track(facility)
                facility.release()
                self._uow.collect_event(FacilityReleased(facility_id=facility_id))
        except Exception as e:
            self._logger.error(
                "Facility release failed", facility_id=facility_id, error=str(e)
            )
            raise
        self._logger.info("Facility released", facility_id=facility_id)
        return facility

    def get_facility(self, facility_id: int) -> Facility:
        return self._uow.facilities.get(facility_id)

    def list_facilities(self) -> List[Facility]:
        return list(self._uow.facilities)

    def nearby_facilities(self, facility_id: int) -> List[Facility]:
        """Соседние объекты по графу смежности, по возрастанию id."""
        return self._uow.facilities.neighbours(facility_id)
