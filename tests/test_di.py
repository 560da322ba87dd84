"""
Dependency Injection (di/)

Tests Definition, ContainerBuilder, PassConfig, ServiceLocator, Container,
the config service loader and errors.
"""

import pytest

from wirebridge.di import (
    Container,
    ContainerBuilder,
    Definition,
    DependencyCycleError,
    DIError,
    FrozenContainerError,
    InvalidConfigurationError,
    ParameterNotFoundError,
    PassConfig,
    Reference,
    ServiceClosure,
    ServiceLocator,
    ServiceNotFoundError,
    SERVICE_CONTAINER_ID,
    SERVICE_LOCATOR_TAG,
    import_string,
    load_services,
    parse_definition,
    register_service_locator,
    sort_by_priority,
)


class Greeter:
    def __init__(self, greeting: str = "hello"):
        self.greeting = greeting
        self.names = []

    def add_name(self, name):
        self.names.append(name)


class Holder:
    def __init__(self, *items):
        self.items = items


class Counter:
    created = 0

    def __init__(self):
        Counter.created += 1


# ============================================================================
# Definition
# ============================================================================

class TestDefinition:

    def test_method_calls_keep_order(self):
        definition = Definition(Greeter)
        definition.add_method_call("add_name", ["a"]).add_method_call("add_name", ["b"])

        assert [c.arguments for c in definition.get_method_calls()] == [["a"], ["b"]]
        assert definition.has_method_call("add_name")
        assert not definition.has_method_call("other")

    def test_empty_method_name_rejected(self):
        with pytest.raises(DIError):
            Definition(Greeter).add_method_call("")

    def test_replace_argument(self):
        definition = Definition(Greeter, ["hi"])
        definition.replace_argument(0, "hey")
        assert definition.arguments == ["hey"]

    def test_replace_argument_out_of_range(self):
        with pytest.raises(DIError, match="between 0 and 0"):
            Definition(Greeter, ["hi"]).replace_argument(1, "x")

    def test_replace_argument_without_arguments(self):
        with pytest.raises(DIError, match="no arguments"):
            Definition(Greeter).replace_argument(0, "x")

    def test_tags_repeatable_and_copied(self):
        definition = Definition(Greeter)
        definition.add_tag("t", event="a").add_tag("t", event="b")

        tags = definition.get_tag("t")
        assert tags == [{"event": "a"}, {"event": "b"}]

        tags[0]["event"] = "mutated"
        assert definition.get_tag("t")[0]["event"] == "a"

        definition.clear_tag("t")
        assert not definition.has_tag("t")

    def test_import_string(self):
        assert import_string("wirebridge.di.locator:ServiceLocator") is ServiceLocator
        assert import_string("wirebridge.di.locator.ServiceLocator") is ServiceLocator

    def test_import_string_errors(self):
        with pytest.raises(DIError):
            import_string("nonexistent_module_xyz:Thing")
        with pytest.raises(DIError):
            import_string("wirebridge.di.locator:Missing")
        with pytest.raises(DIError):
            import_string("nodots")


# ============================================================================
# ContainerBuilder
# ============================================================================

class TestContainerBuilder:

    def test_get_definition_missing_suggests(self):
        builder = ContainerBuilder()
        builder.register("app.mailer", Greeter)

        with pytest.raises(ServiceNotFoundError) as exc_info:
            builder.get_definition("app.mailr")

        assert exc_info.value.candidates == ["app.mailer"]
        assert "app.mailer" in str(exc_info.value)

    def test_find_tagged_service_ids(self):
        builder = ContainerBuilder()
        builder.register("b", Greeter).add_tag("x", priority=1).add_tag("x", priority=2)
        builder.register("a", Greeter).add_tag("x")
        builder.register("c", Greeter).add_tag("y")

        tagged = builder.find_tagged_service_ids("x")
        assert list(tagged) == ["b", "a"]
        assert tagged["b"] == [{"priority": 1}, {"priority": 2}]
        assert tagged["a"] == [{}]
        assert builder.find_tagged_service_ids("z") == {}

    def test_parameters(self):
        builder = ContainerBuilder({"a": 1})
        builder.set_parameter("b", 2)

        assert builder.get_parameter("a") == 1
        assert builder.has_parameter("b")
        with pytest.raises(ParameterNotFoundError):
            builder.get_parameter("c")

        params = builder.get_parameters()
        assert params == {"a": 1, "b": 2}
        params["a"] = 99
        assert builder.get_parameter("a") == 1

    def test_remove_definition(self):
        builder = ContainerBuilder()
        builder.register("a", Greeter)
        builder.remove_definition("a")
        builder.remove_definition("never_registered")

        assert not builder.has_definition("a")
        builder.compile()
        with pytest.raises(FrozenContainerError):
            builder.remove_definition("a")

    def test_get_compiler_passes_in_run_order(self):
        class Pass:
            def process(self, container):
                pass

        low, high = Pass(), Pass()
        builder = ContainerBuilder()
        builder.add_compiler_pass(low, priority=-1)
        builder.add_compiler_pass(high, priority=1)

        assert builder.get_compiler_passes() == [high, low]

    def test_compile_runs_passes_once_and_freezes(self):
        runs = []

        class Pass:
            def process(self, container):
                runs.append(container)

        builder = ContainerBuilder()
        builder.add_compiler_pass(Pass())
        builder.compile()
        builder.compile()

        assert runs == [builder]
        assert builder.is_compiled
        with pytest.raises(FrozenContainerError):
            builder.register("late", Greeter)
        with pytest.raises(FrozenContainerError):
            builder.add_compiler_pass(Pass())
        with pytest.raises(FrozenContainerError):
            builder.set_parameter("x", 1)

    def test_pass_may_register_definitions(self):
        class Pass:
            def process(self, container):
                container.register("added", Greeter)

        builder = ContainerBuilder()
        builder.add_compiler_pass(Pass())
        builder.compile()
        assert builder.has_definition("added")


# ============================================================================
# PassConfig
# ============================================================================

class TestPassConfig:

    def test_priority_order_stable(self):
        order = []

        class Pass:
            def __init__(self, name):
                self.name = name

            def process(self, container):
                order.append(self.name)

        config = PassConfig()
        config.add_pass(Pass("low"), priority=-10)
        config.add_pass(Pass("first_zero"))
        config.add_pass(Pass("high"), priority=10)
        config.add_pass(Pass("second_zero"))
        config.run(ContainerBuilder())

        assert order == ["high", "first_zero", "second_zero", "low"]
        assert len(config) == 4

    def test_rejects_non_pass(self):
        with pytest.raises(TypeError):
            PassConfig().add_pass(object())

    def test_sort_by_priority(self):
        items = [("a", 0), ("b", 5), ("c", 0), ("d", 5), ("e", -1)]
        assert [name for name, _ in sort_by_priority(items, lambda i: i[1])] == ["b", "d", "a", "c", "e"]


# ============================================================================
# ServiceLocator
# ============================================================================

class TestServiceLocator:

    def test_lazy_and_cached(self):
        calls = []

        def factory():
            calls.append(1)
            return object()

        locator = ServiceLocator({"svc": factory})
        assert calls == []
        assert locator.has("svc") and "svc" in locator and len(locator) == 1

        first = locator.get("svc")
        assert locator.get("svc") is first
        assert calls == [1]

    def test_unknown_id(self):
        locator = ServiceLocator({"b": object, "a": object})
        with pytest.raises(ServiceNotFoundError) as exc_info:
            locator.get("c")

        assert exc_info.value.candidates == ["a", "b"]
        assert "service locator" in str(exc_info.value)

    def test_membership(self):
        locator = ServiceLocator({"a": object})
        assert "a" in locator
        assert "b" not in locator
        assert locator.provided_services() == ["a"]

    def test_register_service_locator(self):
        builder = ContainerBuilder()
        ref = register_service_locator(builder, {"x": Reference("x"), "y": Reference("y")})

        definition = builder.get_definition(ref.id)
        assert ref.id.startswith(".service_locator.")
        assert definition.cls is ServiceLocator
        assert definition.public is False
        assert definition.has_tag(SERVICE_LOCATOR_TAG)
        assert definition.arguments[0]["x"] == ServiceClosure(Reference("x"))

    def test_register_service_locator_dedupes(self):
        builder = ContainerBuilder()
        first = register_service_locator(builder, {"x": Reference("x"), "y": Reference("y")})
        second = register_service_locator(builder, {"y": Reference("y"), "x": Reference("x")})
        third = register_service_locator(builder, {"x": Reference("x")})

        assert first == second
        assert first != third


# ============================================================================
# Container
# ============================================================================

class TestContainer:

    def test_arguments_and_calls(self):
        builder = ContainerBuilder()
        builder.register("greeting", str, ["hi"], public=False)
        builder.register("greeter", Greeter, [Reference("greeting")]).add_method_call("add_name", ["ann"])

        container = builder.build()
        greeter = container.get("greeter")
        assert greeter.greeting == "hi"
        assert greeter.names == ["ann"]
        assert container.get("greeter") is greeter

    def test_string_class_path(self):
        builder = ContainerBuilder()
        builder.register("locator", "wirebridge.di.locator:ServiceLocator", [{}])
        assert isinstance(builder.build().get("locator"), ServiceLocator)

    def test_private_service_not_public(self):
        builder = ContainerBuilder()
        builder.register("hidden", Greeter, public=False)
        container = builder.build()

        assert not container.has("hidden")
        with pytest.raises(ServiceNotFoundError, match="private"):
            container.get("hidden")

    def test_unknown_service(self):
        container = ContainerBuilder().build()
        with pytest.raises(ServiceNotFoundError):
            container.get("nope")

    def test_service_container_is_self(self):
        container = ContainerBuilder().build()
        assert container.has(SERVICE_CONTAINER_ID)
        assert container.get(SERVICE_CONTAINER_ID) is container

    def test_not_shared_creates_new_instances(self):
        builder = ContainerBuilder()
        builder.register("counter", Counter, shared=False)
        container = builder.build()
        before = Counter.created

        assert container.get("counter") is not container.get("counter")
        assert Counter.created == before + 2

    def test_nested_arguments_resolved(self):
        builder = ContainerBuilder()
        builder.register("g", Greeter, public=False)
        builder.register("holder", Holder, [[Reference("g")], {"k": Reference("g")}, (Reference("g"),)])

        holder = builder.build().get("holder")
        g = holder.items[0][0]
        assert isinstance(g, Greeter)
        assert holder.items[1]["k"] is g
        assert holder.items[2] == (g,)

    def test_locator_reaches_private_services_lazily(self):
        builder = ContainerBuilder()
        builder.register("private.counter", Counter, public=False)
        ref = register_service_locator(builder, {"private.counter": Reference("private.counter")})
        builder.register("holder", Holder, [ref])
        container = builder.build()

        locator = container.get("holder").items[0]
        assert not container.initialized("private.counter")
        counter = locator.get("private.counter")
        assert isinstance(counter, Counter)
        assert container.initialized("private.counter")

    def test_cycle_detected(self):
        builder = ContainerBuilder()
        builder.register("a", Holder, [Reference("b")])
        builder.register("b", Holder, [Reference("a")])

        with pytest.raises(DependencyCycleError) as exc_info:
            builder.build().get("a")

        assert exc_info.value.cycle == ["a", "b", "a"]

    def test_missing_reference_names_requester(self):
        builder = ContainerBuilder()
        builder.register("a", Holder, [Reference("ghost")])

        with pytest.raises(ServiceNotFoundError) as exc_info:
            builder.build().get("a")

        assert exc_info.value.requested_by == "a"

    def test_parameters_available(self):
        builder = ContainerBuilder({"x": 1})
        container = builder.build()
        assert container.get_parameter("x") == 1
        with pytest.raises(ParameterNotFoundError):
            container.get_parameter("y")


# ============================================================================
# Service loader
# ============================================================================

class TestLoader:

    def test_parse_definition(self):
        definition = parse_definition("app.greeter", {
            "class": Greeter,
            "arguments": ["@app.greeting", "@@literal", 3, ["@x"]],
            "public": False,
            "calls": [["add_name", ["@bob"]], "reset"],
            "tags": [{"name": "orm.event_listener", "event": "e", "priority": 2}, "plain"],
        })

        assert definition.arguments == [Reference("app.greeting"), "@literal", 3, [Reference("x")]]
        assert definition.public is False
        assert [(c.method, c.arguments) for c in definition.calls] == [
            ("add_name", [Reference("bob")]),
            ("reset", []),
        ]
        assert definition.get_tag("orm.event_listener") == [{"event": "e", "priority": 2}]
        assert definition.get_tag("plain") == [{}]

    def test_missing_class(self):
        with pytest.raises(InvalidConfigurationError, match="class"):
            parse_definition("x", {"arguments": []})

    def test_unknown_keys(self):
        with pytest.raises(InvalidConfigurationError, match="factory_method"):
            parse_definition("x", {"class": Greeter, "factory_method": "make"})

    def test_bad_tag(self):
        with pytest.raises(InvalidConfigurationError, match="tag"):
            parse_definition("x", {"class": Greeter, "tags": [{"event": "e"}]})

    def test_not_a_mapping(self):
        with pytest.raises(InvalidConfigurationError):
            parse_definition("x", ["class", Greeter])

    def test_load_services(self):
        builder = ContainerBuilder()
        loaded = load_services(builder, {"a": {"class": Greeter}, "b": {"class": Greeter}})
        assert list(loaded) == ["a", "b"]
        assert builder.has_definition("a") and builder.has_definition("b")
