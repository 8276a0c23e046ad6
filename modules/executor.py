"""
Escena3D — Command Executor
Aplica los comandos del intérprete sobre el SceneStore.
"""

import logging
from dataclasses import replace

from core.commands import (
    AddPrimitive,
    Ask,
    Command,
    Delete,
    PlaceAbove,
    SetMaterial,
    SetPosition,
    Shape,
    validate_command,
)
from modules.geometry import position_above
from modules.scene import DEFAULT_COLOR, SceneObject, SceneStore

logger = logging.getLogger("escena3d.executor")


class ExecutionError(Exception):
    """El comando es válido pero no se puede aplicar a la escena actual."""


class CommandExecutor:
    """Lado de escritura: traduce comandos en cambios sobre la escena."""

    def __init__(self, store: SceneStore, default_color: str = DEFAULT_COLOR):
        self.store = store
        self.default_color = default_color

    def _resolve(self, name: str) -> SceneObject:
        obj = self.store.get_object_by_name(name)
        if obj is None:
            raise ExecutionError(f'No existe ningún objeto llamado "{name}"')
        return obj

    def apply(self, command: Command) -> Command:
        """
        Aplica un comando y devuelve la versión efectivamente ejecutada.

        Raises:
            ExecutionError: comando incompleto u objeto inexistente.
        """
        if isinstance(command, Ask):
            return command

        if not validate_command(command):
            raise ExecutionError(f"Comando inválido: {command!r}")

        if isinstance(command, AddPrimitive):
            shape = Shape(command.shape)
            name = self.store.generate_unique_name(command.name or shape.value)
            color = command.color or self.default_color
            obj = SceneObject.create(
                shape,
                name,
                params=command.params,
                color=color,
                position=command.position,
            )
            self.store.add_object(obj)
            logger.info(f"Creado {obj.shape.value} '{obj.name}'")
            return replace(
                command, shape=shape, name=name, color=color, position=obj.position
            )

        if isinstance(command, Delete):
            obj = self._resolve(command.target)
            self.store.delete_object(obj.id)
            logger.info(f"Eliminado '{obj.name}'")
            return replace(command, target=obj.name)

        if isinstance(command, SetMaterial):
            obj = self._resolve(command.target)
            self.store.update_object(obj.id, color=command.color)
            return replace(command, target=obj.name)

        if isinstance(command, SetPosition):
            obj = self._resolve(command.target)
            self.store.update_object(obj.id, position=tuple(command.position))
            return replace(command, target=obj.name)

        if isinstance(command, PlaceAbove):
            target = self._resolve(command.target)
            base = self._resolve(command.base)
            if target.id == base.id:
                raise ExecutionError("No se puede colocar un objeto sobre sí mismo")
            new_position = position_above(target, base, command.gap)
            self.store.update_object(target.id, position=new_position)
            logger.info(f"'{target.name}' colocado sobre '{base.name}' en {new_position}")
            return replace(command, target=target.name, base=base.name)

        raise ExecutionError(f"Comando no soportado: {type(command).__name__}")

    def execute(self, commands: list[Command]) -> list[Command]:
        """Aplica los comandos en orden; se detiene en el primer error."""
        return [self.apply(command) for command in commands]
