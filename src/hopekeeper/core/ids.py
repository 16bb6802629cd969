from typing import NewType

EventId = NewType('EventId', str)
VarName = NewType('VarName', str)
ItemId = NewType('ItemId', str)
StatusId = NewType('StatusId', str)
