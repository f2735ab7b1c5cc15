from .models import ModuleDescriptor, ModuleDescriptorBuilder, PCHUsageMode
from .registry import DescriptorRegistry
from .loader import load_descriptors, load_registry

__all__ = [
    "ModuleDescriptor",
    "ModuleDescriptorBuilder",
    "PCHUsageMode",
    "DescriptorRegistry",
    "load_descriptors",
    "load_registry",
]
