from courier_registry.domain.instance.util.di.provider import InstanceProvider

__all__ = ["InstanceProvider"]
