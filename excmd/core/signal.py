
import weakref
import functools
import types
import logging


class InstanceSignal(object):
    '''
    The signal of one sender object. Bound-method observers are keyed by
    their object and plain callables by themselves, both weakly.
    '''

    def __init__(self, name):
        self._observer_methods = weakref.WeakKeyDictionary()
        self._observer_objects = weakref.WeakSet()
        self._name = name
        self._errors = None

    def connect(self, observer):
        if isinstance(observer, types.MethodType):
            methods = self._observer_methods.setdefault(observer.__self__, set())
            methods.add(observer.__func__)
        else:
            self._observer_objects.add(observer)
        return observer

    def disconnect(self, observer):
        if isinstance(observer, types.MethodType):
            methods = self._observer_methods.get(observer.__self__)
            if methods is not None:
                methods.discard(observer.__func__)
        else:
            self._observer_objects.discard(observer)

    @property
    def errors(self):
        '''
        Exceptions raised by observers during the last call made with
        ``preserve_errors=True``.
        '''
        if self._errors is None:
            raise RuntimeError('you forgot to use preserve_errors')
        return self._errors

    def __call__(self, *args, preserve_errors=False, **kw):
        self._errors = [] if preserve_errors else None

        # list(...) holds strong refs for the duration of the call
        observers = [types.MethodType(func, obj)
                     for obj, funcs in list(self._observer_methods.items())
                     for func in list(funcs)]
        observers.extend(list(self._observer_objects))

        for observer in observers:
            try:
                observer(*args, **kw)
            except Exception as exc:
                logging.exception('Error in signal handler %r', self._name)
                if preserve_errors:
                    self._errors.append(exc)


class Signal(object):
    '''
    Declare a per-instance signal. The decorated function serves only as a
    prototype for documentation; calling the signal calls every connected
    observer with the same arguments.

    Observers are held weakly, so connecting a bound method does not keep
    its object alive.
    '''
    def __init__(self, proto_func):
        self._proto_func = proto_func
        self._instances = weakref.WeakKeyDictionary()
        functools.update_wrapper(self, proto_func)

    def __get__(self, instance, owner):
        if instance is None:
            return self

        inst = self._instances.get(instance)
        if inst is None:
            inst = InstanceSignal(self._proto_func.__name__)
            functools.update_wrapper(inst, self._proto_func)
            self._instances[instance] = inst

        return inst
