"""
luaudecl.luau: the Luau side of the pipeline.

Modules:
  - types: LuaType union, TypeRegistry, TypeMapper
  - items: LuaFunc/LuaStruct/LuaEnum/LuaModule conversion from scanned items
  - resolver: module graph -> single rooted tree
  - emitter: declaration file text
"""

__all__ = [
    "types",
    "items",
    "resolver",
    "emitter",
]
