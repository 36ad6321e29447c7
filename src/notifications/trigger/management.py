"""Trigger management commands + handlers — admin configuration of triggers."""

from notifications.domain import notifications
from notifications.trigger.trigger import TriggerConfig
from protean.fields import Boolean, Identifier, Integer, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle


@notifications.command(part_of="TriggerConfig")
class ConfigureTrigger:
    trigger_type: String(required=True)
    title_template: String(required=True, max_length=255)
    message_template: Text(required=True)
    delay_minutes: Integer(default=0, min_value=0)
    send_email: Boolean(default=False)
    send_push: Boolean(default=False)
    is_active: Boolean(default=True)


@notifications.command(part_of="TriggerConfig")
class UpdateTrigger:
    """Change a trigger. Omitted fields are left as they are."""

    trigger_id: Identifier(required=True)
    title_template: String(max_length=255)
    message_template: Text()
    delay_minutes: Integer(min_value=0)
    send_email: Boolean()
    send_push: Boolean()
    is_active: Boolean()


@notifications.command(part_of="TriggerConfig")
class ActivateTrigger:
    trigger_id: Identifier(required=True)


@notifications.command(part_of="TriggerConfig")
class DeactivateTrigger:
    trigger_id: Identifier(required=True)


@notifications.command_handler(part_of=TriggerConfig)
class ManageTriggersHandler:
    @handle(ConfigureTrigger)
    def configure_trigger(self, command: ConfigureTrigger):
        trigger = TriggerConfig.configure(
            trigger_type=command.trigger_type,
            title_template=command.title_template,
            message_template=command.message_template,
            delay_minutes=command.delay_minutes,
            send_email=command.send_email,
            send_push=command.send_push,
            is_active=command.is_active,
        )
        current_domain.repository_for(TriggerConfig).add(trigger)
        return str(trigger.id)

    @handle(UpdateTrigger)
    def update_trigger(self, command: UpdateTrigger):
        repo = current_domain.repository_for(TriggerConfig)
        trigger = repo.get(command.trigger_id)
        trigger.update(
            title_template=command.title_template,
            message_template=command.message_template,
            delay_minutes=command.delay_minutes,
            send_email=command.send_email,
            send_push=command.send_push,
        )
        if command.is_active is True:
            trigger.activate()
        elif command.is_active is False:
            trigger.deactivate()
        repo.add(trigger)

    @handle(ActivateTrigger)
    def activate_trigger(self, command: ActivateTrigger):
        repo = current_domain.repository_for(TriggerConfig)
        trigger = repo.get(command.trigger_id)
        trigger.activate()
        repo.add(trigger)

    @handle(DeactivateTrigger)
    def deactivate_trigger(self, command: DeactivateTrigger):
        repo = current_domain.repository_for(TriggerConfig)
        trigger = repo.get(command.trigger_id)
        trigger.deactivate()
        repo.add(trigger)
