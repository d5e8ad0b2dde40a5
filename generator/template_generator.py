#!/usr/bin/env python3
"""
基于模板的基准程序生成器

三种模板：
1. 复杂main方法：多个变量、条件分支、嵌套循环和无关计数循环
2. 多个辅助方法：静态方法调用链
3. 数组与for-each：数组初始化、带分支的累加

同一个种子总是生成同一个程序。程序内每个变量（含循环计数器和方法参数）的名字都唯一，
依赖分析和切片点选择按名字区分变量。
"""

import random
import logging
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


VARIABLE_NAMES = [
    "sum", "prod", "count", "total", "value", "index", "size", "length",
    "max", "min", "avg", "diff", "ratio", "factor", "base", "offset", "limit", "threshold",
    "score", "weight", "price", "amount", "quantity", "rate", "percent", "scale", "level",
]


class TemplateGenerator:
    """模板程序生成器"""

    def __init__(self, rng: Optional[random.Random] = None):
        """
        Args:
            rng: 未指定种子时使用的随机数生成器
        """
        self.rng = rng if rng is not None else random.Random(0)
        self.templates: List[Callable[[random.Random, str], str]] = [
            self.complex_main,
            self.multiple_methods,
            self.arrays_and_loops,
        ]

    def generate(self, seed: Optional[int] = None, template: Optional[int] = None,
                 class_name: Optional[str] = None) -> str:
        """
        生成一个Java程序

        Args:
            seed: 随机种子，None时使用生成器自身的随机数生成器
            template: 模板编号（0-2），None时随机选择
            class_name: 类名，None时随机生成 ExampleNNN

        Returns:
            Java源代码
        """
        rng = random.Random(seed) if seed is not None else self.rng
        if template is None:
            template = rng.randrange(len(self.templates))
        number = rng.randrange(1000)
        class_name = class_name or f"Example{number}"
        code = self.templates[template](rng, class_name)
        logger.debug(f"Generated {class_name} from template {template} (seed={seed})")
        return code

    def _names(self, rng: random.Random, count: int) -> List[str]:
        pool = rng.sample(VARIABLE_NAMES, count)
        return [f"{name}{i}" for i, name in enumerate(pool)]

    def complex_main(self, rng: random.Random, class_name: str) -> str:
        names = self._names(rng, rng.randint(3, 6))
        lines = [
            f"public class {class_name} {{",
            "    public static void main(String[] args) {",
        ]
        for name in names:
            lines.append(f"        int {name} = {rng.randint(0, 99)};")

        lines += [
            "        int temp = 0;",
            "        for (int i0 = 0; i0 < 5; i0++) {",
            "            if (i0 % 2 == 0) {",
            "                temp += i0 * 2;",
            "            } else {",
            "                temp -= i0;",
            "            }",
            "        }",
        ]
        calcs = [f"calc{i}" for i in range(rng.randint(1, 3))]
        for calc in calcs:
            lines.append(f"        int {calc} = temp + {rng.randint(1, 49)};")

        lines += [
            "        for (int i1 = 0; i1 < 10; i1++) {",
            "            for (int j1 = 0; j1 < 3; j1++) {",
        ]
        for name in names + calcs:
            lines.append(f"                {name} += i1 * j1;")
        lines += ["            }", "        }"]

        threshold = rng.randint(5, 20)
        lines.append(f"        if (temp > {threshold}) {{")
        for name in names + calcs:
            lines.append(f"            {name} *= 2;")
        lines.append("        } else {")
        for name in names + calcs:
            lines.append(f"            {name} /= 2;")
        lines.append("        }")

        lines += [
            "        int unrelatedCounter = 0;",
            f"        while (unrelatedCounter < {rng.randint(2, 5)}) {{",
            "            System.out.println(\"tick\");",
            "            unrelatedCounter++;",
            "        }",
        ]
        for name in names + calcs:
            lines.append(f"        System.out.println({name});")
        lines += ["    }", "}"]
        return '\n'.join(lines) + '\n'

    def multiple_methods(self, rng: random.Random, class_name: str) -> str:
        x, y, z = (rng.randint(1, 20) for _ in range(3))
        calls = ['add', 'mul', 'sub', 'div']
        lines = [
            f"public class {class_name} {{",
            "    public static int add(int a1, int b1) { return a1 + b1; }",
            "    public static int mul(int a2, int b2) { return a2 * b2; }",
            "    public static int sub(int a3, int b3) { return a3 - b3; }",
            "    public static int div(int a4, int b4) { return b4 != 0 ? a4 / b4 : 0; }",
            "    public static void main(String[] args) {",
            f"        int x = {x}, y = {y}, z = {z};",
            "        int gap = 0;",
            "        if (x > y) {",
            "            gap = x - y;",
            "        } else {",
            "            gap = y - x;",
            "        }",
            "        int temp1 = add(x, y);",
        ]
        count = rng.randint(3, 6)
        for i in range(2, count + 1):
            call = rng.choice(calls)
            operand = rng.choice(['x', 'y', 'z', f"temp{i - 1}"])
            lines.append(f"        int temp{i} = {call}(temp{i - 1}, {operand});")
        lines += [
            f"        int unrelated1 = {rng.randint(1, 9)} + {rng.randint(1, 9)};",
            f"        int unrelated2 = unrelated1 * {rng.randint(2, 9)};",
        ]
        for i in range(1, count + 1):
            lines.append(f"        System.out.println(temp{i});")
        lines += [
            "        System.out.println(gap);",
            "        System.out.println(unrelated2);",
            "    }",
            "}",
        ]
        return '\n'.join(lines) + '\n'

    def arrays_and_loops(self, rng: random.Random, class_name: str) -> str:
        sizes = [rng.randint(4, 12) for _ in range(3)]
        factors = [rng.randint(2, 5) for _ in range(3)]
        lines = [
            f"public class {class_name} {{",
            "    public static void main(String[] args) {",
        ]
        for k in range(3):
            lines.append(f"        int[] arr{k + 1} = new int[{sizes[k]}];")
        for k in range(3):
            i = f"i{k + 1}"
            lines.append(f"        for (int {i} = 0; {i} < arr{k + 1}.length; {i}++) "
                         f"{{ arr{k + 1}[{i}] = {i} * {factors[k]}; }}")
        lines.append("        int sum1 = 0, sum2 = 0, sum3 = 0;")
        for k in range(3):
            modulus = rng.randint(2, 5)
            lines += [
                f"        for (int v{k + 1} : arr{k + 1}) {{",
                f"            if (v{k + 1} % {modulus} == 0) {{",
                f"                sum{k + 1} += v{k + 1};",
                "            } else {",
                f"                sum{k + 1} -= v{k + 1};",
                "            }",
                "        }",
            ]
        lines += [
            "        int result1 = sum1 + sum2;",
            "        int result2 = sum2 + sum3;",
            "        int result3 = sum1 + sum3;",
            "        int finalResult = result1 + result2 + result3;",
            f"        int unrelatedScale = {rng.randint(1, 30)};",
            f"        unrelatedScale = unrelatedScale * {rng.randint(2, 4)} + {rng.randint(0, 9)};",
            "        System.out.println(unrelatedScale);",
            "        System.out.println(sum1);",
            "        System.out.println(sum2);",
            "        System.out.println(sum3);",
            "        System.out.println(finalResult);",
            "    }",
            "}",
        ]
        return '\n'.join(lines) + '\n'
